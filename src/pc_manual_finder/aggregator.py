from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import httpx

from pc_manual_finder.config import Settings, settings as default_settings
from pc_manual_finder.models import SearchRequest, SearchResponse
from pc_manual_finder.query import query_for_request
from pc_manual_finder.reddit import search_forums
from pc_manual_finder.youtube import search_videos

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _results_or_empty(source: str, outcome: list | BaseException) -> list:
    if isinstance(outcome, BaseException):
        logger.error("%s source failed: %r", source, outcome)
        return []
    return outcome


async def aggregate(
    request: SearchRequest,
    client: httpx.AsyncClient,
    settings: Settings | None = None,
    semaphore: asyncio.Semaphore | None = None,
) -> SearchResponse:
    """Run both sources for one request and assemble the response envelope.

    Raises InvalidSearchRequest before any upstream call when the request
    lacks a component type or brand. A source that fails contributes no
    results instead of failing the whole response.
    """
    s = settings or default_settings
    query = query_for_request(request)
    logger.info("Searching for: %s", query)

    videos, manuals = await asyncio.gather(
        search_videos(client, query, settings=s),
        search_forums(client, query, settings=s, semaphore=semaphore),
        return_exceptions=True,
    )

    return SearchResponse(
        videos=_results_or_empty("YouTube", videos),
        manuals=_results_or_empty("Reddit", manuals),
        query=query,
        timestamp=_timestamp(),
    )
