"""Search suggestions from the unofficial YouTube autocomplete endpoint"""

import json
import logging
from typing import Any, List, Optional

import httpx

from ..core.settings import get_settings
from ..core.exceptions import SuggestionError

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


class SuggestClient:
    """
    Best-effort autocomplete client.

    The endpoint answers with ``[query, [suggestion, ...], ...]``, sometimes
    wrapped in a JSONP callback. Any failure yields no suggestions.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = get_settings()
        self.url = self.settings.suggest_api_url
        self.client = http_client or httpx.AsyncClient(timeout=self.settings.request_timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get_search_suggestions(self, query: str) -> List[str]:
        """
        Get autocomplete suggestions for a partial query.

        Args:
            query: Text typed so far; shorter than two characters returns []

        Returns:
            Suggestion strings, possibly empty
        """
        if not query or len(query) < MIN_QUERY_LENGTH:
            return []

        params = {"client": "youtube", "ds": "yt", "q": query}

        try:
            response = await self.client.get(self.url, params=params)
            if response.status_code != 200:
                logger.warning(f"Suggestion request returned {response.status_code}")
                return []
            return self._parse_suggestions(response.text)

        except (httpx.HTTPError, SuggestionError) as e:
            logger.error(f"Error getting search suggestions: {e}")
            return []

    @staticmethod
    def _parse_suggestions(body: str) -> List[str]:
        """Extract the suggestion list from a JSON or JSONP body"""
        payload = body.strip()
        if payload and payload[0] != "[":
            start, end = payload.find("("), payload.rfind(")")
            if start == -1 or end <= start:
                raise SuggestionError("Unrecognized suggestion payload")
            payload = payload[start + 1:end]

        try:
            data = json.loads(payload)
        except ValueError as e:
            raise SuggestionError(f"Malformed suggestion payload: {e}")

        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            return []

        return [_suggestion_text(entry) for entry in data[1] if _suggestion_text(entry)]


def _suggestion_text(entry: Any) -> str:
    # JSONP flavour nests each suggestion as [text, type, ...]
    if isinstance(entry, list):
        return str(entry[0]) if entry else ""
    return str(entry) if entry is not None else ""
