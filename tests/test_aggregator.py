import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pc_manual_finder.aggregator import aggregate
from pc_manual_finder.models import ForumResult, SearchRequest, VideoResult
from pc_manual_finder.query import InvalidSearchRequest


def _videos(n: int) -> list[VideoResult]:
    return [
        VideoResult(id=f"v{i}", title=f"Video {i}", url=f"https://www.youtube.com/watch?v=v{i}")
        for i in range(n)
    ]


def _manuals(n: int) -> list[ForumResult]:
    return [
        ForumResult(
            id=f"p{i}",
            title=f"Post {i}",
            url=f"https://reddit.com/p{i}",
            subreddit="buildapc",
            created="1/1/2024",
        )
        for i in range(n)
    ]


@pytest.fixture
def client() -> httpx.AsyncClient:
    return MagicMock(spec=httpx.AsyncClient)


@pytest.fixture
def gpu_request() -> SearchRequest:
    return SearchRequest(component_type="GPU", brand="NVIDIA", model="RTX 4070")


class TestAggregate:
    async def test_assembles_envelope(self, client, gpu_request, test_settings):
        with patch("pc_manual_finder.aggregator.search_videos", new_callable=AsyncMock) as mock_videos:
            with patch("pc_manual_finder.aggregator.search_forums", new_callable=AsyncMock) as mock_forums:
                mock_videos.return_value = _videos(2)
                mock_forums.return_value = _manuals(3)
                resp = await aggregate(gpu_request, client, settings=test_settings)

        assert len(resp.videos) == 2
        assert len(resp.manuals) == 3
        assert resp.query == "NVIDIA RTX 4070 GPU installation guide manual"
        parsed = datetime.fromisoformat(resp.timestamp)
        assert parsed.tzinfo is not None
        assert resp.timestamp.endswith("Z")

    async def test_both_sources_see_same_query(self, client, gpu_request, test_settings):
        with patch("pc_manual_finder.aggregator.search_videos", new_callable=AsyncMock) as mock_videos:
            with patch("pc_manual_finder.aggregator.search_forums", new_callable=AsyncMock) as mock_forums:
                mock_videos.return_value = []
                mock_forums.return_value = []
                await aggregate(gpu_request, client, settings=test_settings)

        expected = "NVIDIA RTX 4070 GPU installation guide manual"
        assert mock_videos.call_args.args == (client, expected)
        assert mock_forums.call_args.args == (client, expected)

    async def test_both_sources_failing_yields_empty_lists(self, client, gpu_request, test_settings):
        with patch("pc_manual_finder.aggregator.search_videos", new_callable=AsyncMock) as mock_videos:
            with patch("pc_manual_finder.aggregator.search_forums", new_callable=AsyncMock) as mock_forums:
                mock_videos.side_effect = RuntimeError("youtube exploded")
                mock_forums.side_effect = httpx.ConnectError("reddit down")
                resp = await aggregate(gpu_request, client, settings=test_settings)

        assert resp.videos == []
        assert resp.manuals == []
        assert resp.query == "NVIDIA RTX 4070 GPU installation guide manual"

    async def test_one_source_failing_keeps_the_other(self, client, gpu_request, test_settings):
        with patch("pc_manual_finder.aggregator.search_videos", new_callable=AsyncMock) as mock_videos:
            with patch("pc_manual_finder.aggregator.search_forums", new_callable=AsyncMock) as mock_forums:
                mock_videos.side_effect = RuntimeError("youtube exploded")
                mock_forums.return_value = _manuals(2)
                resp = await aggregate(gpu_request, client, settings=test_settings)

        assert resp.videos == []
        assert len(resp.manuals) == 2

    async def test_invalid_request_makes_no_upstream_calls(self, client, test_settings):
        request = SearchRequest(component_type="", brand="NVIDIA")
        with patch("pc_manual_finder.aggregator.search_videos", new_callable=AsyncMock) as mock_videos:
            with patch("pc_manual_finder.aggregator.search_forums", new_callable=AsyncMock) as mock_forums:
                with pytest.raises(InvalidSearchRequest):
                    await aggregate(request, client, settings=test_settings)

        mock_videos.assert_not_awaited()
        mock_forums.assert_not_awaited()

    async def test_sources_run_concurrently(self, client, gpu_request, test_settings):
        forum_started = asyncio.Event()

        async def slow_videos(*args, **kwargs):
            await forum_started.wait()
            return _videos(1)

        async def forums(*args, **kwargs):
            forum_started.set()
            return _manuals(1)

        with patch("pc_manual_finder.aggregator.search_videos", side_effect=slow_videos):
            with patch("pc_manual_finder.aggregator.search_forums", side_effect=forums):
                resp = await asyncio.wait_for(
                    aggregate(gpu_request, client, settings=test_settings), timeout=2
                )

        assert len(resp.videos) == 1
        assert len(resp.manuals) == 1
