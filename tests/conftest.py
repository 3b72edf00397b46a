"""Pytest configuration and shared fixtures"""

import pytest
from unittest.mock import Mock, AsyncMock

from viral_finder.clients.youtube_client import YouTubeClient
from viral_finder.core.settings import reload_settings
from viral_finder.models.comment_models import CommentThreadRaw
from viral_finder.models.search_models import KeyCheckResult
from viral_finder.models.video_models import YouTubeChannelRaw, YouTubeVideoRaw


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Setup test environment variables"""
    monkeypatch.setenv("YOUTUBE_API_KEY", "test_youtube_key")
    monkeypatch.setenv("KEY_STORE_PATH", str(tmp_path / "state.json"))
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("LOG_TO_FILE", "false")
    reload_settings()


@pytest.fixture
def make_video_item():
    """Factory for videos.list items as the API returns them"""
    def make(
        video_id: str,
        channel_id: str = "UC_channel_a",
        views="50000",
        duration="PT10M",
        title=None,
        published_at="2024-01-15T10:00:00Z",
        tags=None
    ) -> dict:
        item = {
            "id": video_id,
            "snippet": {
                "title": title or f"Video {video_id}",
                "description": "Scalp care routine review",
                "channelId": channel_id,
                "channelTitle": f"Channel {channel_id}",
                "publishedAt": published_at,
                "thumbnails": {
                    "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                    "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
                },
            },
            "statistics": {"viewCount": views, "likeCount": "1200", "commentCount": "80"},
            "contentDetails": {"duration": duration},
        }
        if tags is not None:
            item["snippet"]["tags"] = tags
        return item

    return make


@pytest.fixture
def make_channel_item():
    """Factory for channels.list items as the API returns them"""
    def make(
        channel_id: str,
        subscribers="1000",
        hidden: bool = False,
        country="JP"
    ) -> dict:
        statistics = {"hiddenSubscriberCount": hidden, "viewCount": "900000", "videoCount": "120"}
        if subscribers is not None:
            statistics["subscriberCount"] = subscribers
        snippet = {"title": f"Channel {channel_id}"}
        if country is not None:
            snippet["country"] = country
        return {"id": channel_id, "snippet": snippet, "statistics": statistics}

    return make


@pytest.fixture
def make_video(make_video_item):
    """Factory for parsed video resources"""
    def make(video_id: str, **kwargs) -> YouTubeVideoRaw:
        return YouTubeVideoRaw.model_validate(make_video_item(video_id, **kwargs))

    return make


@pytest.fixture
def make_channel(make_channel_item):
    """Factory for parsed channel resources"""
    def make(channel_id: str, **kwargs) -> YouTubeChannelRaw:
        return YouTubeChannelRaw.model_validate(make_channel_item(channel_id, **kwargs))

    return make


@pytest.fixture
def make_thread():
    """Factory for parsed comment threads with optional inlined replies"""
    def make(top_level_id: str, replies=None, text="Great video") -> CommentThreadRaw:
        item = {
            "id": top_level_id,
            "snippet": {
                "topLevelComment": {
                    "id": top_level_id,
                    "snippet": {
                        "authorDisplayName": "viewer",
                        "textDisplay": text,
                        "textOriginal": text,
                        "likeCount": 3,
                        "publishedAt": "2024-02-01T09:00:00Z",
                        "updatedAt": "2024-02-01T09:00:00Z",
                    },
                },
                "totalReplyCount": len(replies or []),
            },
        }
        if replies:
            item["replies"] = {"comments": replies}
        return CommentThreadRaw.model_validate(item)

    return make


@pytest.fixture
def mock_youtube_client():
    """Mock YouTube client"""
    client = Mock(spec=YouTubeClient)
    client.search_videos = AsyncMock(return_value=([], None))
    client.get_video_details = AsyncMock(return_value=[])
    client.get_channel_details = AsyncMock(return_value=[])
    client.get_comment_threads = AsyncMock(return_value=([], None))
    client.verify_api_key = AsyncMock(return_value=KeyCheckResult(ok=True))
    client.close = AsyncMock()
    client.get_quota_usage = Mock(return_value=0)
    client.reset_quota_tracking = Mock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client
