"""Tests for the discover and trending feed sessions"""

import asyncio
import pytest
from unittest.mock import AsyncMock, Mock

from niche_navigator.core.exceptions import YouTubeAPIError
from niche_navigator.models.video_models import FilterCriteria, Niche, SearchResult
from niche_navigator.services.aggregator import NicheAggregator
from niche_navigator.services.feed_session import (
    LOAD_ERROR, LOAD_MORE_ERROR, TRENDING_ERROR, DiscoverFeed, TrendingFeed
)

from conftest import create_test_video


def page(*video_ids, token=None):
    return SearchResult(
        videos=[create_test_video(video_id, f"Video {video_id}") for video_id in video_ids],
        next_page_token=token
    )


def ids(feed):
    return [video.id for video in feed.videos]


class TestDiscoverFeed:

    @pytest.fixture
    def aggregator(self):
        aggregator = Mock(spec=NicheAggregator)
        aggregator.discovery_feed = AsyncMock(return_value=page("r1", "r2").videos)
        return aggregator

    @pytest.fixture
    def feed(self, mock_youtube_client, aggregator):
        return DiscoverFeed(mock_youtube_client, aggregator, niche="sports")

    def test_initial_state(self, feed):
        assert feed.niche == Niche.SPORTS
        assert feed.videos == []
        assert not feed.has_more
        assert not feed.is_loading
        assert feed.page_size == 20

    @pytest.mark.asyncio
    async def test_query_refresh_replaces_videos(self, feed, mock_youtube_client):
        mock_youtube_client.search_videos.return_value = page("a", "b", token="T1")
        feed.set_query(" robots ")

        assert await feed.refresh()

        assert ids(feed) == ["a", "b"]
        assert feed.next_page_token == "T1"
        assert not feed.is_loading
        mock_youtube_client.search_videos.assert_awaited_once_with("robots", Niche.SPORTS, 20)

    @pytest.mark.asyncio
    async def test_empty_query_uses_random_feed(self, feed, aggregator, mock_youtube_client):
        assert await feed.refresh()

        assert ids(feed) == ["r1", "r2"]
        assert not feed.has_more
        aggregator.discovery_feed.assert_awaited_once()
        mock_youtube_client.search_videos.assert_not_called()

    @pytest.mark.asyncio
    async def test_load_more_appends_next_page(self, feed, mock_youtube_client):
        mock_youtube_client.search_videos.side_effect = [page("a", token="T1"), page("b", token=None)]
        feed.set_query("robots")

        await feed.refresh()
        assert await feed.load_more()

        assert ids(feed) == ["a", "b"]
        assert not feed.has_more
        assert mock_youtube_client.search_videos.await_args.args == ("robots", Niche.SPORTS, 20, "T1")

    @pytest.mark.asyncio
    async def test_load_more_without_token_is_noop(self, feed, mock_youtube_client):
        assert not await feed.load_more()
        mock_youtube_client.search_videos.assert_not_called()

    @pytest.mark.asyncio
    async def test_load_more_while_loading_is_noop(self, feed, mock_youtube_client):
        feed.next_page_token = "T1"
        feed.is_loading = True

        assert not await feed.load_more()
        mock_youtube_client.search_videos.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self, feed, mock_youtube_client):
        release_first = asyncio.Event()

        async def search(query, niche, max_results, page_token=None):
            if query == "cats":
                await release_first.wait()
                return page("cat1", token="CAT")
            return page("dog1", token="DOG")

        mock_youtube_client.search_videos.side_effect = search

        feed.set_query("cats")
        first = asyncio.create_task(feed.refresh())
        await asyncio.sleep(0)

        feed.set_query("dogs")
        assert await feed.refresh()

        release_first.set()
        assert not await first

        assert ids(feed) == ["dog1"]
        assert feed.next_page_token == "DOG"
        assert not feed.is_loading

    @pytest.mark.asyncio
    async def test_error_sets_message_and_retry_recovers(self, feed, mock_youtube_client):
        mock_youtube_client.search_videos.side_effect = [
            YouTubeAPIError("YouTube API error: 500"),
            page("a", token="T1"),
        ]
        feed.set_query("robots")

        assert await feed.refresh()
        assert feed.error == LOAD_ERROR
        assert not feed.is_loading
        assert feed.videos == []

        assert await feed.retry()
        assert feed.error is None
        assert ids(feed) == ["a"]

    @pytest.mark.asyncio
    async def test_unexpected_error_clears_loading(self, feed, mock_youtube_client):
        mock_youtube_client.search_videos.side_effect = [KeyError("items"), page("a")]
        feed.set_query("cats")

        assert await feed.refresh()
        assert not feed.is_loading
        assert feed.error == LOAD_ERROR

        assert await feed.retry()
        assert feed.error is None
        assert ids(feed) == ["a"]

    @pytest.mark.asyncio
    async def test_stale_failure_is_discarded(self, feed, mock_youtube_client):
        release_first = asyncio.Event()

        async def search(query, niche, max_results, page_token=None):
            if query == "cats":
                await release_first.wait()
                raise RuntimeError("connection reset")
            return page("dog1")

        mock_youtube_client.search_videos.side_effect = search

        feed.set_query("cats")
        first = asyncio.create_task(feed.refresh())
        await asyncio.sleep(0)

        feed.set_query("dogs")
        assert await feed.refresh()

        release_first.set()
        assert not await first

        assert feed.error is None
        assert ids(feed) == ["dog1"]
        assert not feed.is_loading

    @pytest.mark.asyncio
    async def test_load_more_error_keeps_loaded_videos(self, feed, mock_youtube_client):
        mock_youtube_client.search_videos.side_effect = [
            page("a", token="T1"),
            YouTubeAPIError("Network error"),
        ]
        feed.set_query("robots")

        await feed.refresh()
        await feed.load_more()

        assert feed.error == LOAD_MORE_ERROR
        assert ids(feed) == ["a"]
        assert feed.next_page_token == "T1"

    @pytest.mark.asyncio
    async def test_retry_without_previous_fetch(self, feed):
        assert not await feed.retry()

    @pytest.mark.asyncio
    async def test_set_niche_resets_state(self, feed, mock_youtube_client):
        mock_youtube_client.search_videos.return_value = page("a", token="T1")
        feed.set_query("robots")
        await feed.refresh()

        feed.set_niche("Science")

        assert feed.niche == Niche.SCIENCE
        assert feed.videos == []
        assert feed.next_page_token is None

    def test_set_niche_rejects_unknown(self, feed):
        with pytest.raises(ValueError):
            feed.set_niche("Cooking")

    @pytest.mark.asyncio
    async def test_apply_sort_and_filters(self, feed, sample_videos):
        feed.videos = sample_videos

        assert [v.id for v in feed.apply_sort("views")] == ["v3", "v2", "v1", "v4"]
        assert [v.id for v in feed.apply_filters(FilterCriteria(min_views=0, min_likes=0, min_comments=0))] == [
            "v2", "v1", "v4"
        ]


class TestTrendingFeed:

    @pytest.fixture
    def aggregator(self):
        aggregator = Mock(spec=NicheAggregator)
        aggregator.trending_feed = AsyncMock()
        return aggregator

    @pytest.mark.asyncio
    async def test_refresh_and_load_more(self, aggregator):
        aggregator.trending_feed.side_effect = [page("t1", token="N1"), page("t2")]
        feed = TrendingFeed(aggregator, page_size=10)

        await feed.refresh()
        await feed.load_more()

        assert ids(feed) == ["t1", "t2"]
        assert aggregator.trending_feed.await_args_list[0].args == (10,)
        assert aggregator.trending_feed.await_args_list[1].args == (10, "N1")

    @pytest.mark.asyncio
    async def test_error_message(self, aggregator):
        aggregator.trending_feed.side_effect = YouTubeAPIError("quota")
        feed = TrendingFeed(aggregator)

        await feed.refresh()

        assert feed.error == TRENDING_ERROR

    @pytest.mark.asyncio
    async def test_search_narrows_loaded_videos(self, aggregator):
        aggregator.trending_feed.return_value = SearchResult(videos=[
            create_test_video("a", "Chess opening traps"),
            create_test_video("b", "Cooking pasta"),
        ])
        feed = TrendingFeed(aggregator)
        await feed.refresh()

        await feed.search("chess")
        assert ids(feed) == ["a"]

        await feed.search("  ")
        assert ids(feed) == ["a", "b"]
        assert aggregator.trending_feed.await_count == 2
