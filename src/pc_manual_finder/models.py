from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(_CamelModel):
    component_type: str
    brand: str
    model: str | None = None


class ResultItem(_CamelModel):
    id: str
    title: str
    description: str | None = None
    url: str
    type: Literal["video", "forum"]
    source: str
    thumbnail: str | None = None


class VideoResult(ResultItem):
    type: Literal["video"] = "video"
    source: str = "YouTube"
    channel_title: str | None = None
    published_at: str | None = None
    duration: str = "Unknown"
    view_count: str = "Unknown"


class ForumResult(ResultItem):
    type: Literal["forum"] = "forum"
    source: str = "Reddit"
    score: int = 0
    comments: int = 0
    subreddit: str
    created: str


class SearchResponse(BaseModel):
    videos: list[VideoResult]
    manuals: list[ForumResult]
    query: str
    timestamp: str


class HealthResponse(BaseModel):
    status: str
    video_source_configured: bool
    forum_communities: int


class ErrorResponse(BaseModel):
    error: str
