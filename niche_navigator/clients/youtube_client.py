"""YouTube Data API client for niche video search"""

import httpx
import logging
from typing import List, Dict, Any, Optional, Tuple, Union

from ..core.settings import get_settings
from ..core.exceptions import ConfigurationError, QuotaExceededError, YouTubeAPIError
from ..core.formatting import avatar_url, format_duration, parse_count, parse_timestamp
from ..core.niches import NicheMapper
from ..models.video_models import Niche, ALL_NICHES, SearchResult, VideoRecord

# Setup logging
logger = logging.getLogger(__name__)

# Quota costs of the two endpoints we call
SEARCH_QUOTA_COST = 100
VIDEOS_QUOTA_COST = 1

# The videos endpoint accepts at most 50 ids per call
MAX_IDS_PER_REQUEST = 50


class YouTubeClient:
    """
    YouTube Data API client.

    ``search_videos`` chains a keyword search with a batch detail lookup and
    never raises: every failure is logged and becomes an empty result.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        mapper: Optional[NicheMapper] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize YouTube API client.

        Args:
            api_key: YouTube Data API key (if None, loads from settings)
            mapper: Category/niche mapping policy (if None, built from settings)
            http_client: Preconfigured httpx client, mainly for tests
        """
        self.settings = get_settings()
        self.api_key = api_key or self.settings.youtube_api_key

        if not self.api_key:
            raise ConfigurationError("YouTube API key is required")

        self.client = http_client or httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=10,
                max_keepalive_connections=5
            ),
            timeout=self.settings.request_timeout
        )

        self.base_url = self.settings.youtube_api_base_url.rstrip("/")
        self.mapper = mapper or NicheMapper()
        self.quota_used = 0  # Track quota usage

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def search_videos(
        self,
        query: str = "",
        niche: Union[Niche, str] = Niche.ENTERTAINMENT,
        max_results: int = 20,
        page_token: Optional[str] = None
    ) -> SearchResult:
        """
        Search videos by keyword within a niche.

        Args:
            query: Free-text query; may be empty
            niche: Niche used as keyword and category constraint, or "All"
            max_results: Maximum number of results (1-50)
            page_token: Continuation token from a previous page

        Returns:
            Normalized videos plus the next continuation token, if any.
            Empty on any failure.
        """
        niche_name = niche.value if isinstance(niche, Niche) else str(niche)
        search_query = self._build_query(query, niche_name)

        logger.info(
            f"Searching videos: '{search_query}' (niche {niche_name}, "
            f"max {max_results}, page {'next' if page_token else 'first'})"
        )

        try:
            params: Dict[str, Any] = {
                "part": "snippet",
                "q": search_query,
                "type": "video",
                "maxResults": max(1, min(max_results, 50)),
                "key": self.api_key
            }
            if page_token:
                params["pageToken"] = page_token

            category_id = self.mapper.category_for_niche(niche_name)
            if category_id:
                params["videoCategoryId"] = category_id

            video_ids, next_page_token = await self._make_search_request(params)
            if not video_ids:
                return SearchResult()

            videos = await self.get_video_details(video_ids)
            if not videos:
                return SearchResult()

            logger.info(f"Found {len(videos)} videos for '{search_query}'")
            return SearchResult(videos=videos, next_page_token=next_page_token)

        except Exception as e:
            logger.error(f"Error searching videos for '{search_query}': {e}")
            return SearchResult()

    async def get_video_details(self, video_ids: List[str]) -> List[VideoRecord]:
        """
        Get statistics and content details for specific video IDs.

        Args:
            video_ids: List of YouTube video IDs

        Returns:
            List of normalized videos, in API order

        Raises:
            QuotaExceededError: When API quota is exceeded
            YouTubeAPIError: For other API errors
        """
        if not video_ids:
            return []

        logger.debug(f"Getting details for {len(video_ids)} videos")

        self._check_quota(VIDEOS_QUOTA_COST)

        params = {
            "part": "snippet,statistics,contentDetails",
            "id": ",".join(video_ids[:MAX_IDS_PER_REQUEST]),
            "key": self.api_key
        }

        return await self._make_videos_request(params)

    @staticmethod
    def _build_query(query: str, niche: str) -> str:
        """Combine the user query with the niche keyword"""
        query = (query or "").strip()
        niche_keyword = "" if niche == ALL_NICHES else niche
        if query:
            return f"{query} {niche_keyword}".strip()
        return niche_keyword

    def _check_quota(self, cost: int) -> None:
        if self.quota_used + cost > self.settings.max_daily_quota:
            raise QuotaExceededError(f"Would exceed daily quota limit ({self.settings.max_daily_quota})")

    async def _make_search_request(self, params: Dict[str, Any]) -> Tuple[List[str], Optional[str]]:
        """Make search API request; returns video ids and the next page token"""
        self._check_quota(SEARCH_QUOTA_COST)

        data = await self._get_json("search", params)

        self.quota_used += SEARCH_QUOTA_COST
        logger.debug(f"Quota used: {self.quota_used}/{self.settings.max_daily_quota}")

        video_ids = []
        for item in data.get("items") or []:
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                video_ids.append(video_id)

        return video_ids, data.get("nextPageToken") or None

    async def _make_videos_request(self, params: Dict[str, Any]) -> List[VideoRecord]:
        """Make videos API request and normalize every item"""
        data = await self._get_json("videos", params)

        self.quota_used += VIDEOS_QUOTA_COST
        logger.debug(f"Quota used: {self.quota_used}/{self.settings.max_daily_quota}")

        videos = []
        for item in data.get("items") or []:
            try:
                videos.append(self._parse_video_item(item))
            except Exception as e:
                logger.warning(f"Failed to parse video {item.get('id', 'unknown')}: {e}")
                continue

        return videos

    async def _get_json(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET an API endpoint and decode the JSON object body"""
        try:
            response = await self.client.get(f"{self.base_url}/{endpoint}", params=params)
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 403:
                error_reason = self._error_reason(e.response)
                if "quotaExceeded" in error_reason:
                    raise QuotaExceededError("YouTube API daily quota exceeded")
                raise YouTubeAPIError(f"YouTube API access forbidden: {error_reason}")
            raise YouTubeAPIError(f"YouTube API error: {e.response.status_code}")

        except httpx.RequestError as e:
            raise YouTubeAPIError(f"Network error: {str(e)}")

        except ValueError as e:
            raise YouTubeAPIError(f"Malformed response from {endpoint}: {e}")

        if not isinstance(data, dict):
            raise YouTubeAPIError(f"Malformed response from {endpoint}: expected an object")

        return data

    @staticmethod
    def _error_reason(response: httpx.Response) -> str:
        try:
            error_data = response.json() if response.content else {}
            return error_data.get("error", {}).get("errors", [{}])[0].get("reason", "")
        except (ValueError, AttributeError, IndexError):
            return ""

    def _parse_video_item(self, item: Dict[str, Any]) -> VideoRecord:
        """Parse YouTube API video item into a VideoRecord"""
        snippet = item.get("snippet") or {}
        statistics = item.get("statistics") or {}
        content_details = item.get("contentDetails") or {}

        thumbnails = snippet.get("thumbnails") or {}
        thumbnail_url = (
            (thumbnails.get("high") or {}).get("url") or
            (thumbnails.get("default") or {}).get("url") or
            ""
        )

        channel_name = snippet.get("channelTitle") or ""

        return VideoRecord(
            id=item.get("id") or "",
            title=snippet.get("title") or "",
            channel_name=channel_name,
            channel_avatar=avatar_url(channel_name, self.settings.avatar_base_url),
            thumbnail_url=thumbnail_url,
            view_count=parse_count(statistics.get("viewCount")),
            like_count=parse_count(statistics.get("likeCount")),
            comment_count=parse_count(statistics.get("commentCount")),
            duration=format_duration(content_details.get("duration")),
            published_at=parse_timestamp(snippet.get("publishedAt")),
            niche=self.mapper.niche_for_category(snippet.get("categoryId"))
        )

    def get_quota_usage(self) -> int:
        """Get current quota usage for this session"""
        return self.quota_used

    def reset_quota_tracking(self) -> None:
        """Reset quota tracking (call at start of new day)"""
        self.quota_used = 0
        logger.info("Quota tracking reset")
