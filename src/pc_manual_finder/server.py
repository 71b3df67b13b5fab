from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx
import uvicorn
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from pc_manual_finder.aggregator import aggregate
from pc_manual_finder.config import settings
from pc_manual_finder.models import ErrorResponse, HealthResponse, SearchRequest, SearchResponse
from pc_manual_finder.query import InvalidSearchRequest
from pc_manual_finder.reddit import effective_communities

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.http_client = httpx.AsyncClient(follow_redirects=True)
    app.state.forum_semaphore = asyncio.Semaphore(settings.forum_max_concurrency)
    yield
    await app.state.http_client.aclose()


app = FastAPI(title="PC Manual Finder", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.get(
    "/api/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search(
    component_type: str | None = Query(default=None, alias="componentType"),
    brand: str | None = Query(default=None),
    model: str | None = Query(default=None),
) -> SearchResponse | JSONResponse:
    request = SearchRequest(component_type=component_type or "", brand=brand or "", model=model)
    try:
        return await aggregate(
            request,
            app.state.http_client,
            settings=settings,
            semaphore=app.state.forum_semaphore,
        )
    except InvalidSearchRequest as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except Exception:
        logger.exception("Unexpected error during search")
        return JSONResponse(status_code=500, content={"error": "Failed to search for manuals"})


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        video_source_configured=bool(settings.youtube_api_key),
        forum_communities=len(effective_communities(settings)),
    )


def mount_static(target: FastAPI, directory: str | None) -> bool:
    """Serve the browser client from ``directory`` at ``/``; API routes keep precedence."""
    if not directory:
        return False
    path = Path(directory)
    if not path.is_dir():
        logger.warning("Static directory %s does not exist, not serving it", path)
        return False
    target.mount("/", StaticFiles(directory=path, html=True), name="static")
    return True


mount_static(app, settings.static_dir)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=settings.host, port=settings.port)
