"""Pytest configuration and shared fixtures"""

import os

# Must be set before the package configures logging on import
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("YOUTUBE_API_KEY", "test_youtube_key")

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, AsyncMock

from niche_navigator.core import settings as settings_module
from niche_navigator.core.settings import reload_settings
from niche_navigator.models.video_models import Niche, SearchResult, VideoRecord
from niche_navigator.clients.youtube_client import YouTubeClient


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Setup test environment variables"""
    monkeypatch.setenv("YOUTUBE_API_KEY", "test_youtube_key")
    monkeypatch.setenv("MAX_DAILY_QUOTA", "10000")
    monkeypatch.setenv("LOG_DIR", "")
    monkeypatch.setenv("ENVIRONMENT", "development")
    reload_settings()
    yield
    # Rebuilt lazily once monkeypatch has restored the environment
    settings_module._settings = None


@pytest.fixture
def sample_video():
    """Sample normalized video"""
    return VideoRecord(
        id="abc123",
        title="Amazing Machine Learning Breakthrough Explained",
        channel_name="TechChannel",
        channel_avatar="https://api.dicebear.com/7.x/avataaars/svg?seed=TechChannel",
        thumbnail_url="https://i.ytimg.com/vi/abc123/hqdefault.jpg",
        view_count=600000,
        like_count=30000,
        comment_count=1500,
        duration="12:34",
        published_at=datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc),
        niche=Niche.AI
    )


@pytest.fixture
def sample_videos():
    """Videos with distinct counters, durations and dates"""
    return [
        create_test_video("v1", "Zebra documentary", views=5000, likes=400, comments=20,
                          duration="45:10", published_at=datetime(2024, 3, 1, tzinfo=timezone.utc)),
        create_test_video("v2", "apple pie recipe", views=250000, likes=9000, comments=300,
                          duration="8:05", published_at=datetime(2024, 5, 20, tzinfo=timezone.utc)),
        create_test_video("v3", "Marathon training plan", views=900000, likes=1200, comments=4000,
                          duration="1:02:03", published_at=datetime(2023, 12, 31, tzinfo=timezone.utc)),
        create_test_video("v4", "Quick tip", views=800, likes=50, comments=5,
                          duration="0:45", published_at=datetime(2024, 5, 21, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def mock_youtube_client():
    """Mock YouTube client"""
    client = Mock(spec=YouTubeClient)
    client.search_videos = AsyncMock(return_value=SearchResult())
    client.get_video_details = AsyncMock(return_value=[])
    client.get_quota_usage = Mock(return_value=0)
    client.reset_quota_tracking = Mock()
    client.aclose = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_youtube_search_response():
    """Mock YouTube search API response data"""
    return {
        "nextPageToken": "CAUQAA",
        "items": [
            {"id": {"kind": "youtube#video", "videoId": "abc123"}},
            {"id": {"kind": "youtube#video", "videoId": "def456"}},
        ]
    }


@pytest.fixture
def mock_youtube_videos_response():
    """Mock YouTube videos API response data"""
    return {
        "items": [
            {
                "id": "abc123",
                "snippet": {
                    "title": "Amazing Machine Learning Breakthrough",
                    "publishedAt": "2024-01-15T10:00:00Z",
                    "channelTitle": "TechChannel",
                    "categoryId": "28",
                    "thumbnails": {
                        "default": {"url": "https://i.ytimg.com/vi/abc123/default.jpg"},
                        "high": {"url": "https://i.ytimg.com/vi/abc123/hqdefault.jpg"}
                    }
                },
                "contentDetails": {"duration": "PT1H2M3S"},
                "statistics": {
                    "viewCount": "1000000",
                    "likeCount": "50000",
                    "commentCount": "2500"
                }
            },
            {
                "id": "def456",
                "snippet": {
                    "title": "Stats Hidden",
                    "publishedAt": "2024-02-01T08:30:00Z",
                    "channelTitle": "Quiet Channel",
                    "categoryId": "99",
                    "thumbnails": {
                        "default": {"url": "https://i.ytimg.com/vi/def456/default.jpg"}
                    }
                },
                "contentDetails": {"duration": "PT45S"},
                "statistics": {"viewCount": "1234", "likeCount": "hidden"}
            }
        ]
    }


# Helper functions for tests
def create_test_video(
    video_id: str,
    title: str,
    niche: Niche = Niche.ENTERTAINMENT,
    views: int = 100000,
    likes: int = 5000,
    comments: int = 250,
    duration: str = "5:00",
    published_at: datetime = None
) -> VideoRecord:
    """Create a test video with specified parameters"""
    return VideoRecord(
        id=video_id,
        title=title,
        channel_name="TestChannel",
        channel_avatar="https://example.com/avatar.svg",
        thumbnail_url=f"https://example.com/{video_id}.jpg",
        view_count=views,
        like_count=likes,
        comment_count=comments,
        duration=duration,
        published_at=published_at or datetime.now(timezone.utc),
        niche=niche
    )
