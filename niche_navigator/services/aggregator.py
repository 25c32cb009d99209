"""Multi-niche aggregation: one search per niche, merged into a single list"""

import logging
import random
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..clients.youtube_client import YouTubeClient
from ..core.logging import log_performance
from ..core.niches import DEFAULT_NICHES
from ..core.settings import get_settings
from ..models.video_models import (
    ALL_NICHES, AnalyticsReport, EngagementMetrics, Niche, NicheAverages,
    SearchResult, VideoRecord
)

# Setup logging
logger = logging.getLogger(__name__)

RANKING_METRICS = ("view_count", "like_count", "comment_count")


def rank_by(videos: Sequence[VideoRecord], metric: str, top_n: int) -> List[VideoRecord]:
    """Top ``top_n`` videos by ``metric``, descending"""
    if metric not in RANKING_METRICS:
        raise ValueError(f"metric must be one of {RANKING_METRICS}")
    return sorted(videos, key=lambda v: getattr(v, metric), reverse=True)[:top_n]


def engagement_metrics(videos: Sequence[VideoRecord]) -> EngagementMetrics:
    """Average counters and (likes + comments) / views in percent"""
    if not videos:
        return EngagementMetrics()

    total_views = sum(v.view_count for v in videos)
    total_likes = sum(v.like_count for v in videos)
    total_comments = sum(v.comment_count for v in videos)
    count = len(videos)

    rate = 0.0
    if total_views > 0:
        rate = round((total_likes + total_comments) / total_views * 100, 2)

    return EngagementMetrics(
        avg_views=round(total_views / count),
        avg_likes=round(total_likes / count),
        avg_comments=round(total_comments / count),
        engagement_rate=rate
    )


def niche_distribution(videos: Sequence[VideoRecord], niches: Sequence[Niche]) -> Dict[str, int]:
    distribution = {niche.value: 0 for niche in niches}
    for video in videos:
        if video.niche.value in distribution:
            distribution[video.niche.value] += 1
    return distribution


def niche_averages(videos: Sequence[VideoRecord], niches: Sequence[Niche]) -> Dict[str, NicheAverages]:
    averages = {}
    for niche in niches:
        members = [v for v in videos if v.niche == niche]
        if not members:
            averages[niche.value] = NicheAverages()
            continue
        averages[niche.value] = NicheAverages(
            video_count=len(members),
            avg_views=round(sum(v.view_count for v in members) / len(members)),
            avg_likes=round(sum(v.like_count for v in members) / len(members))
        )
    return averages


class NicheAggregator:
    """
    Fans a search out over a fixed list of niches.

    Requests are issued one niche at a time, each awaited before the next.
    A niche whose request fails contributes nothing; the others still count.

    ``niches_without_results`` in the stats counts niches that raised or came
    back empty. The real client turns failures into empty results, so the two
    cases are not told apart.
    """

    def __init__(
        self,
        youtube_client: Optional[YouTubeClient] = None,
        niches: Optional[Sequence[Niche]] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the aggregator.

        Args:
            youtube_client: YouTube API client (if None, created on first use)
            niches: Niches to fan out over, in order (defaults to all five)
            rng: Random source for feed shuffling
        """
        self.settings = get_settings()
        self.youtube_client = youtube_client
        self._owns_client = youtube_client is None
        self.niches: List[Niche] = [Niche(n) for n in (niches or DEFAULT_NICHES)]
        self.rng = rng or random.Random()

        self.stats = {
            "niches_queried": 0,
            "niches_without_results": 0,
            "videos_collected": 0,
        }

    def _client(self) -> YouTubeClient:
        if self.youtube_client is None:
            self.youtube_client = YouTubeClient()
        return self.youtube_client

    async def collect(self, query: str = "", per_niche: int = 5) -> List[VideoRecord]:
        """
        Run one search per niche and concatenate the results.

        Every video is tagged with the niche whose request returned it.

        Args:
            query: Free-text query shared by all niches (may be empty)
            per_niche: Maximum results requested per niche

        Returns:
            Videos in niche order
        """
        client = self._client()
        all_videos: List[VideoRecord] = []

        for i, niche in enumerate(self.niches):
            logger.debug(f"Niche {i + 1}/{len(self.niches)}: {niche.value}")
            self.stats["niches_queried"] += 1
            try:
                result = await client.search_videos(query, niche, per_niche)
            except Exception as e:
                self.stats["niches_without_results"] += 1
                logger.error(f"Error fetching {niche.value} videos: {e}")
                continue

            if not result.videos:
                self.stats["niches_without_results"] += 1
                logger.info(f"No {niche.value} videos returned")
                continue

            all_videos.extend(video.with_niche(niche) for video in result.videos)

        self.stats["videos_collected"] += len(all_videos)
        logger.info(f"Collected {len(all_videos)} videos across {len(self.niches)} niches")
        return all_videos

    @log_performance("discovery_feed")
    async def discovery_feed(self, per_niche: Optional[int] = None) -> List[VideoRecord]:
        """Videos from every niche in random order"""
        per_niche = per_niche or self.settings.discovery_per_niche
        videos = await self.collect("", per_niche)
        self.rng.shuffle(videos)
        return videos

    @log_performance("analytics")
    async def analytics(
        self,
        per_niche: Optional[int] = None,
        top_n: Optional[int] = None
    ) -> AnalyticsReport:
        """
        Rank one aggregate pull three ways: by views, likes and comments.

        Each ranking is truncated to ``top_n`` independently; aggregates are
        computed over the view ranking.
        """
        per_niche = per_niche or self.settings.analytics_per_niche
        top_n = top_n or self.settings.analytics_top_n

        videos = await self.collect("", per_niche)
        top_viewed = rank_by(videos, "view_count", top_n)

        return AnalyticsReport(
            top_viewed=top_viewed,
            most_liked=rank_by(videos, "like_count", top_n),
            most_commented=rank_by(videos, "comment_count", top_n),
            metrics=engagement_metrics(top_viewed),
            niche_distribution=niche_distribution(top_viewed, self.niches),
            niche_averages=niche_averages(top_viewed, self.niches),
            total_videos_analyzed=len(videos)
        )

    async def trending_feed(
        self,
        max_results: Optional[int] = None,
        page_token: Optional[str] = None,
        today: Optional[date] = None
    ) -> SearchResult:
        """
        Approximate "trending" with a dated keyword search across all niches.

        The Data API search has no trending order, so the query is
        ``trending {year}-{month}``.
        """
        today = today or date.today()
        max_results = max_results or self.settings.search_page_size
        query = f"trending {today.year}-{today.month}"
        return await self._client().search_videos(query, ALL_NICHES, max_results, page_token)

    def get_stats(self) -> Dict[str, int]:
        stats = self.stats.copy()
        if self.youtube_client:
            stats["quota_used"] = self.youtube_client.get_quota_usage()
        return stats

    async def __aenter__(self):
        self._client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Injected clients belong to the caller
        if self._owns_client and self.youtube_client is not None:
            await self.youtube_client.aclose()


# Factory function for easy instantiation
def create_aggregator(youtube_client: Optional[YouTubeClient] = None, **kwargs) -> NicheAggregator:
    return NicheAggregator(youtube_client=youtube_client, **kwargs)
