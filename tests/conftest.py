import pytest

from pc_manual_finder.config import Settings

SAMPLE_YOUTUBE_SEARCH = {
    "items": [
        {
            "id": {"kind": "youtube#video", "videoId": "vid1"},
            "snippet": {
                "title": "How to install an RTX 4070",
                "description": "Step by step GPU install",
                "channelTitle": "Build Channel",
                "publishedAt": "2023-05-01T12:00:00Z",
                "thumbnails": {
                    "default": {"url": "https://i.ytimg.com/vi/vid1/default.jpg"},
                    "medium": {"url": "https://i.ytimg.com/vi/vid1/mqdefault.jpg"},
                },
            },
        },
        {
            "id": {"kind": "youtube#video", "videoId": "vid2"},
            "snippet": {
                "title": "RTX 4070 power cable guide",
                "description": "",
                "channelTitle": "Cable Corner",
                "publishedAt": "2022-11-20T08:30:00Z",
                "thumbnails": {
                    "default": {"url": "https://i.ytimg.com/vi/vid2/default.jpg"},
                },
            },
        },
    ]
}

SAMPLE_YOUTUBE_DETAILS = {
    "items": [
        {
            "id": "vid2",
            "contentDetails": {"duration": "PT5M"},
            "statistics": {"viewCount": "987"},
        },
        {
            "id": "vid1",
            "contentDetails": {"duration": "PT1H2M10S"},
            "statistics": {"viewCount": "12345"},
        },
    ]
}


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        youtube_api_key="test-key",
        forum_communities=["buildapc", "hardware", "nvidia"],
        forum_max_concurrency=2,
    )


@pytest.fixture
def sample_youtube_search() -> dict:
    return SAMPLE_YOUTUBE_SEARCH


@pytest.fixture
def sample_youtube_details() -> dict:
    return SAMPLE_YOUTUBE_DETAILS
