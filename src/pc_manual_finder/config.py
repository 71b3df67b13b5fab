from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    youtube_api_key: str | None = None
    youtube_base_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_max_results: int = 10
    youtube_order: str = "relevance"
    youtube_video_duration: str = "medium"
    youtube_published_after: str = "2020-01-01T00:00:00Z"
    youtube_timeout: float = 10.0

    reddit_base_url: str = "https://www.reddit.com"
    reddit_user_agent: str = "PCManualFinder/1.0"
    reddit_timeout: float = 5.0

    forum_strategy: Literal["search", "trending"] = "search"
    forum_communities: list[str] = []
    forum_search_limit: int = 5
    forum_search_window: str = "year"
    forum_trending_limit: int = 25
    forum_max_results: int = 10
    forum_fallback_community: str = "buildapc"
    forum_fallback_limit: int = 5
    forum_max_concurrency: int = 4

    cors_allow_origins: list[str] = ["*"]
    static_dir: str | None = None

    host: str = "0.0.0.0"
    port: int = 3000


settings = Settings()
