from __future__ import annotations

import logging
import re

import httpx

from pc_manual_finder.config import Settings, settings as default_settings
from pc_manual_finder.models import VideoResult

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
WATCH_URL = "https://www.youtube.com/watch?v="

_DURATION_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")


def format_duration(duration: str | None) -> str:
    """Format an ISO 8601 duration like ``PT1H2M3S`` as ``H:MM:SS`` or ``MM:SS``."""
    if not duration:
        return UNKNOWN
    match = _DURATION_RE.match(duration)
    if not match:
        return UNKNOWN

    hours, minutes, seconds = match.groups()
    result = ""
    if hours and int(hours) > 0:
        result += f"{int(hours)}:"
    result += (minutes or "").zfill(2) + ":"
    result += (seconds or "").zfill(2)
    return result


def format_view_count(value: str | int | None) -> str:
    if not value:
        return UNKNOWN
    try:
        count = int(value)
    except (OverflowError, TypeError, ValueError):
        return UNKNOWN
    if count == 0:
        return UNKNOWN
    return f"{count:,}"


def _pick_thumbnail(thumbnails: dict) -> str | None:
    for size in ("medium", "default"):
        thumb = thumbnails.get(size)
        if thumb and thumb.get("url"):
            return thumb["url"]
    return None


def _build_search_params(query: str, s: Settings) -> dict[str, str | int]:
    return {
        "part": "snippet",
        "q": query,
        "type": "video",
        "maxResults": s.youtube_max_results,
        "order": s.youtube_order,
        "videoDuration": s.youtube_video_duration,
        "publishedAfter": s.youtube_published_after,
        "key": s.youtube_api_key or "",
    }


async def _fetch_details(
    client: httpx.AsyncClient,
    video_ids: list[str],
    s: Settings,
) -> dict[str, dict[str, str]]:
    """One batched lookup for all ids, keyed by video id."""
    if not video_ids:
        return {}

    try:
        response = await client.get(
            f"{s.youtube_base_url}/videos",
            params={
                "part": "contentDetails,statistics",
                "id": ",".join(video_ids),
                "key": s.youtube_api_key or "",
            },
            timeout=s.youtube_timeout,
        )
        response.raise_for_status()
        items = response.json().get("items") or []
        details: dict[str, dict[str, str]] = {}
        for item in items:
            details[item["id"]] = {
                "duration": format_duration(item.get("contentDetails", {}).get("duration")),
                "view_count": format_view_count(item.get("statistics", {}).get("viewCount")),
            }
        return details
    except Exception as exc:
        logger.warning("YouTube video details lookup failed: %s", exc)
        return {}


def _map_video(item: dict, details: dict[str, dict[str, str]]) -> VideoResult:
    video_id = item["id"]["videoId"]
    snippet = item.get("snippet", {})
    detail = details.get(video_id, {})
    return VideoResult(
        id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description") or None,
        url=WATCH_URL + video_id,
        thumbnail=_pick_thumbnail(snippet.get("thumbnails") or {}),
        channel_title=snippet.get("channelTitle"),
        published_at=snippet.get("publishedAt"),
        duration=detail.get("duration", UNKNOWN),
        view_count=detail.get("view_count", UNKNOWN),
    )


async def search_videos(
    client: httpx.AsyncClient,
    query: str,
    settings: Settings | None = None,
) -> list[VideoResult]:
    s = settings or default_settings
    if not s.youtube_api_key:
        logger.debug("YouTube API key not configured, skipping video search")
        return []

    try:
        response = await client.get(
            f"{s.youtube_base_url}/search",
            params=_build_search_params(query, s),
            timeout=s.youtube_timeout,
        )
        response.raise_for_status()
        items = [
            item
            for item in response.json().get("items") or []
            if (item.get("id") or {}).get("videoId")
        ]
        details = await _fetch_details(client, [item["id"]["videoId"] for item in items], s)
        videos = [_map_video(item, details) for item in items]
    except Exception as exc:
        logger.warning("YouTube search failed: %s", exc)
        return []

    logger.info("YouTube found %d videos for query: %s", len(videos), query)
    return videos
