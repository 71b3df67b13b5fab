from __future__ import annotations

import shlex
import socket
import sys
import threading
import time

import httpx
import uvicorn

from pc_manual_finder.config import settings


def start_background_server(app, timeout_s: float = 10.0) -> tuple[uvicorn.Server, threading.Thread, str]:
    """Run ``app`` on a free loopback port in a daemon thread once ``/health`` answers."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    server = uvicorn.Server(uvicorn.Config(app, host="127.0.0.1", port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    base_url = f"http://127.0.0.1:{port}"
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        try:
            if httpx.get(f"{base_url}/health", timeout=0.5).status_code == 200:
                return server, thread, base_url
        except httpx.HTTPError:
            pass
        time.sleep(0.1)
    server.should_exit = True
    raise RuntimeError("Server did not become ready in time")


def _parse_input(raw: str) -> dict[str, str]:
    """Split ``<componentType> <brand> [model...]`` into request params."""
    tokens = shlex.split(raw)
    params: dict[str, str] = {}
    if tokens:
        params["componentType"] = tokens[0]
    if len(tokens) > 1:
        params["brand"] = tokens[1]
    if len(tokens) > 2:
        params["model"] = " ".join(tokens[2:])
    return params


def _print_results(data: dict) -> None:
    print(f"\nQuery: {data['query']}")
    print(f"Videos: {len(data['videos'])}\n")
    for i, v in enumerate(data["videos"], start=1):
        meta = [m for m in (v.get("channelTitle"), v.get("duration"), v.get("viewCount")) if m]
        print(f"  {i}. {v['title']}")
        if meta:
            print(f"     {' | '.join(meta)}")
        print(f"     {v['url']}")
        print()
    print(f"Manuals: {len(data['manuals'])}\n")
    for i, m in enumerate(data["manuals"], start=1):
        print(f"  {i}. [r/{m['subreddit']}] {m['title']}")
        print(f"     score {m['score']}, {m['comments']} comments, {m['created']}")
        print(f"     {m['url']}")
        print()


def main() -> None:
    from pc_manual_finder.server import app

    try:
        server, _thread, base_url = start_background_server(app)
    except RuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"PC Manual Finder CLI ({base_url}) - type 'help' for usage, 'quit' to exit")

    try:
        while True:
            try:
                raw = input("search> ").strip()
            except EOFError:
                break

            if not raw:
                continue
            if raw in ("exit", "quit", "q"):
                break
            if raw == "help":
                print('Usage: <componentType> <brand> [model...]   e.g. GPU NVIDIA "RTX 4070"')
                print("Commands: help, exit/quit/q")
                continue

            try:
                params = _parse_input(raw)
            except ValueError as exc:
                print(f"Parse error: {exc}")
                continue

            try:
                resp = httpx.get(
                    f"{base_url}/api/search",
                    params=params,
                    timeout=settings.youtube_timeout + settings.reddit_timeout + 5,
                )
                if resp.status_code == 200:
                    _print_results(resp.json())
                else:
                    detail = resp.json().get("error", resp.text)
                    print(f"Error ({resp.status_code}): {detail}")
            except (httpx.HTTPError, ValueError) as exc:
                print(f"Error: {exc}")
    except KeyboardInterrupt:
        pass

    print("\nBye!")
    server.should_exit = True
