from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from importlib import resources

import httpx

from pc_manual_finder.config import Settings, settings as default_settings
from pc_manual_finder.models import ForumResult

logger = logging.getLogger(__name__)

DESCRIPTION_LIMIT = 200
ELLIPSIS = "..."
PERMALINK_BASE = "https://reddit.com"

_PLACEHOLDER_THUMBNAILS = {"", "self", "default", "nsfw", "spoiler", "image"}

_COMMUNITIES_CACHE: list[str] | None = None


@dataclass
class CommunityResult:
    community: str
    posts: list[ForumResult] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _load_communities() -> list[str]:
    global _COMMUNITIES_CACHE
    if _COMMUNITIES_CACHE is not None:
        return _COMMUNITIES_CACHE
    try:
        data_path = resources.files("pc_manual_finder").joinpath("communities.json")
        payload = json.loads(data_path.read_text(encoding="utf-8"))
        communities = payload.get("communities", [])
        if not isinstance(communities, list):
            communities = []
    except (OSError, ValueError) as exc:
        logger.warning("Could not load community list: %s", exc)
        communities = []
    _COMMUNITIES_CACHE = [c for c in communities if isinstance(c, str) and c.strip()]
    return _COMMUNITIES_CACHE


def effective_communities(s: Settings) -> list[str]:
    if s.forum_communities:
        return s.forum_communities
    return _load_communities()


def truncate_description(text: str | None) -> str | None:
    if not text:
        return None
    return text[:DESCRIPTION_LIMIT] + ELLIPSIS


def _clean_thumbnail(thumbnail: str | None) -> str | None:
    if not thumbnail or thumbnail in _PLACEHOLDER_THUMBNAILS:
        return None
    return thumbnail


def format_created(created_utc: float | int | None) -> str:
    if created_utc is None:
        return ""
    try:
        dt = datetime.fromtimestamp(float(created_utc), tz=timezone.utc)
    except (OverflowError, OSError, TypeError, ValueError):
        return ""
    return f"{dt.month}/{dt.day}/{dt.year}"


def engagement(post: ForumResult) -> int:
    return post.score + post.comments


def rank_posts(posts: list[ForumResult], limit: int) -> list[ForumResult]:
    return sorted(posts, key=engagement, reverse=True)[:limit]


def matches_query(post: dict, query: str) -> bool:
    """True when any whitespace-separated query term occurs in the title or body."""
    haystack = f"{post.get('title') or ''} {post.get('selftext') or ''}".lower()
    return any(term in haystack for term in query.lower().split())


def _map_post(data: dict) -> ForumResult:
    return ForumResult(
        id=data["id"],
        title=data.get("title", ""),
        description=truncate_description(data.get("selftext")),
        url=PERMALINK_BASE + data.get("permalink", ""),
        thumbnail=_clean_thumbnail(data.get("thumbnail")),
        score=int(data.get("score") or 0),
        comments=int(data.get("num_comments") or 0),
        subreddit=data.get("subreddit", ""),
        created=format_created(data.get("created_utc")),
    )


def _map_posts(raw: list[dict], community: str) -> list[ForumResult]:
    posts: list[ForumResult] = []
    for data in raw:
        try:
            posts.append(_map_post(data))
        except Exception as exc:
            logger.warning("Skipping malformed post in r/%s: %s", community, exc)
    return posts


def _listing_posts(payload: dict) -> list[dict]:
    children = (payload.get("data") or {}).get("children") or []
    return [child["data"] for child in children if isinstance(child, dict) and child.get("data")]


async def _get_listing(
    client: httpx.AsyncClient,
    path: str,
    params: dict[str, str | int],
    s: Settings,
) -> list[dict]:
    response = await client.get(
        f"{s.reddit_base_url}{path}",
        params=params,
        headers={"User-Agent": s.reddit_user_agent},
        timeout=s.reddit_timeout,
    )
    response.raise_for_status()
    return _listing_posts(response.json())


async def _fetch_community(
    client: httpx.AsyncClient,
    community: str,
    query: str,
    s: Settings,
) -> list[ForumResult]:
    if s.forum_strategy == "trending":
        raw = await _get_listing(
            client, f"/r/{community}/hot.json", {"limit": s.forum_trending_limit}, s
        )
        raw = [post for post in raw if matches_query(post, query)]
    else:
        raw = await _get_listing(
            client,
            f"/r/{community}/search.json",
            {
                "q": query,
                "restrict_sr": "on",
                "sort": "relevance",
                "t": s.forum_search_window,
                "limit": s.forum_search_limit,
            },
            s,
        )
    return _map_posts(raw, community)


async def _search_community(
    client: httpx.AsyncClient,
    community: str,
    query: str,
    s: Settings,
    semaphore: asyncio.Semaphore | None,
) -> CommunityResult:
    try:
        if semaphore is not None:
            async with semaphore:
                posts = await _fetch_community(client, community, query, s)
        else:
            posts = await _fetch_community(client, community, query, s)
    except Exception as exc:
        logger.warning("Reddit request failed for r/%s: %s", community, exc)
        return CommunityResult(community=community, error=str(exc) or type(exc).__name__)
    return CommunityResult(community=community, posts=posts)


async def _fallback_listing(client: httpx.AsyncClient, s: Settings) -> list[ForumResult]:
    community = s.forum_fallback_community
    try:
        raw = await _get_listing(
            client, f"/r/{community}/hot.json", {"limit": s.forum_fallback_limit}, s
        )
        return _map_posts(raw[: s.forum_fallback_limit], community)
    except Exception as exc:
        logger.warning("Reddit fallback listing failed for r/%s: %s", community, exc)
        return []


async def search_forums(
    client: httpx.AsyncClient,
    query: str,
    settings: Settings | None = None,
    semaphore: asyncio.Semaphore | None = None,
) -> list[ForumResult]:
    s = settings or default_settings
    communities = effective_communities(s)

    outcomes = await asyncio.gather(
        *(_search_community(client, c, query, s, semaphore) for c in communities)
    )
    posts = [post for outcome in outcomes if outcome.ok for post in outcome.posts]
    failed = [outcome.community for outcome in outcomes if not outcome.ok]
    if failed:
        logger.info("Reddit communities failed: %s", ", ".join(failed))

    if not posts:
        logger.info("No Reddit posts matched, using r/%s listing", s.forum_fallback_community)
        posts = await _fallback_listing(client, s)

    ranked = rank_posts(posts, s.forum_max_results)
    logger.info("Reddit found %d posts for query: %s", len(ranked), query)
    return ranked
