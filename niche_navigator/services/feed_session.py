"""Stateful feeds backing the discover and trending views.

Each fetch takes a sequence number when it starts. Only the response of the
most recently started fetch may touch the feed state; an older response that
arrives late is discarded, so rapid repeated actions cannot apply out of order.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Union

from ..clients.youtube_client import YouTubeClient
from ..core.niches import parse_niche
from ..core.settings import get_settings
from ..models.video_models import FilterCriteria, Niche, SearchResult, SortKey, VideoRecord
from .aggregator import NicheAggregator
from .video_filters import filter_videos, search_within, sort_videos

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load videos. Please try again."
LOAD_MORE_ERROR = "Failed to load more videos. Please try again."
TRENDING_ERROR = "Failed to load trending videos. Please try again."


class FeedSession:
    """Video list plus continuation token, replaced wholesale on each fetch"""

    def __init__(self):
        self.videos: List[VideoRecord] = []
        self.next_page_token: Optional[str] = None
        self.error: Optional[str] = None
        self.is_loading = False
        self._sequence = 0
        self._last_action: Optional[Callable[[], Awaitable[bool]]] = None

    @property
    def has_more(self) -> bool:
        return self.next_page_token is not None

    def _begin(self) -> int:
        self._sequence += 1
        self.is_loading = True
        self.error = None
        return self._sequence

    def _is_current(self, sequence: int) -> bool:
        if sequence != self._sequence:
            logger.debug(f"Discarding stale response #{sequence} (latest #{self._sequence})")
            return False
        return True

    async def _run(
        self,
        fetch: Callable[[], Awaitable[SearchResult]],
        append: bool,
        error_message: str
    ) -> bool:
        """
        Run one fetch and apply its result if it is still the latest.

        Returns:
            True when the result (or its error) was applied
        """
        sequence = self._begin()
        try:
            result = await fetch()
        except Exception as e:
            if not self._is_current(sequence):
                return False
            logger.error(f"Feed fetch failed: {e}")
            self.error = error_message
            return True
        else:
            if not self._is_current(sequence):
                return False
            if append:
                self.videos = self.videos + result.videos
            else:
                self.videos = list(result.videos)
            self.next_page_token = result.next_page_token
            return True
        finally:
            if sequence == self._sequence:
                self.is_loading = False

    def reset(self) -> None:
        """Drop current results; any in-flight response becomes stale"""
        self._sequence += 1
        self.videos = []
        self.next_page_token = None
        self.error = None
        self.is_loading = False

    async def retry(self) -> bool:
        """Re-run the last fetch, typically after an error"""
        if self._last_action is None:
            return False
        return await self._last_action()

    def apply_sort(self, sort_by: Union[SortKey, str]) -> List[VideoRecord]:
        self.videos = sort_videos(self.videos, sort_by)
        return self.videos

    def apply_filters(self, criteria: FilterCriteria) -> List[VideoRecord]:
        self.videos = filter_videos(self.videos, criteria)
        return self.videos


class DiscoverFeed(FeedSession):
    """
    Discover view: query search within a niche, or a shuffled multi-niche
    feed when there is no query.
    """

    def __init__(
        self,
        youtube_client: YouTubeClient,
        aggregator: Optional[NicheAggregator] = None,
        niche: Union[Niche, str] = Niche.ENTERTAINMENT,
        page_size: Optional[int] = None
    ):
        super().__init__()
        self.settings = get_settings()
        self.youtube_client = youtube_client
        self.aggregator = aggregator or NicheAggregator(youtube_client)
        self.niche = parse_niche(niche)
        self.query = ""
        self.page_size = page_size or self.settings.search_page_size

    def set_niche(self, niche: Union[Niche, str]) -> None:
        self.niche = parse_niche(niche)
        self.reset()

    def set_query(self, query: str) -> None:
        self.query = (query or "").strip()
        self.reset()

    async def refresh(self) -> bool:
        """Load the first page for the current query and niche"""
        self._last_action = self.refresh

        if self.query:
            return await self._run(
                lambda: self.youtube_client.search_videos(self.query, self.niche, self.page_size),
                append=False,
                error_message=LOAD_ERROR
            )

        async def random_feed() -> SearchResult:
            return SearchResult(videos=await self.aggregator.discovery_feed())

        return await self._run(random_feed, append=False, error_message=LOAD_ERROR)

    async def load_more(self) -> bool:
        """Append the next page; no-op while loading or when exhausted"""
        if self.is_loading or not self.next_page_token:
            return False

        self._last_action = self.load_more
        token = self.next_page_token
        return await self._run(
            lambda: self.youtube_client.search_videos(self.query, self.niche, self.page_size, token),
            append=True,
            error_message=LOAD_MORE_ERROR
        )


class TrendingFeed(FeedSession):
    """Trending view: dated keyword search across all niches"""

    def __init__(self, aggregator: NicheAggregator, page_size: Optional[int] = None):
        super().__init__()
        self.settings = get_settings()
        self.aggregator = aggregator
        self.page_size = page_size or self.settings.search_page_size

    async def refresh(self) -> bool:
        self._last_action = self.refresh
        return await self._run(
            lambda: self.aggregator.trending_feed(self.page_size),
            append=False,
            error_message=TRENDING_ERROR
        )

    async def load_more(self) -> bool:
        if self.is_loading or not self.next_page_token:
            return False

        self._last_action = self.load_more
        token = self.next_page_token
        return await self._run(
            lambda: self.aggregator.trending_feed(self.page_size, token),
            append=True,
            error_message=TRENDING_ERROR
        )

    async def search(self, text: str) -> bool:
        """Narrow the loaded videos; blank text reloads the feed"""
        if not (text or "").strip():
            return await self.refresh()
        self.videos = search_within(self.videos, text)
        return True
