"""Tests for the autocomplete suggestion client"""

import pytest
import httpx
from unittest.mock import Mock, AsyncMock

from niche_navigator.clients.suggest_client import SuggestClient


class TestSuggestClient:

    @pytest.fixture
    def suggest_client(self):
        client = SuggestClient()
        client.client = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_short_query_makes_no_request(self, suggest_client):
        assert await suggest_client.get_search_suggestions("") == []
        assert await suggest_client.get_search_suggestions("a") == []
        suggest_client.client.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_json_array_response(self, suggest_client):
        suggest_client.client.get.return_value = Mock(
            status_code=200,
            text='["cat", ["cat videos", "cat memes", "cat song"]]'
        )

        suggestions = await suggest_client.get_search_suggestions("cat")

        assert suggestions == ["cat videos", "cat memes", "cat song"]
        _, kwargs = suggest_client.client.get.call_args
        assert kwargs["params"] == {"client": "youtube", "ds": "yt", "q": "cat"}

    @pytest.mark.asyncio
    async def test_jsonp_response(self, suggest_client):
        suggest_client.client.get.return_value = Mock(
            status_code=200,
            text='window.google.ac.h(["dog",[["dog training",0,[512]],["dog sounds",0]],{"k":1}])'
        )

        suggestions = await suggest_client.get_search_suggestions("dog")

        assert suggestions == ["dog training", "dog sounds"]

    @pytest.mark.asyncio
    async def test_non_success_status_returns_empty(self, suggest_client):
        suggest_client.client.get.return_value = Mock(status_code=503, text="")

        assert await suggest_client.get_search_suggestions("cat") == []

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self, suggest_client):
        suggest_client.client.get.side_effect = httpx.ConnectError("unreachable")

        assert await suggest_client.get_search_suggestions("cat") == []

    @pytest.mark.asyncio
    async def test_garbage_body_returns_empty(self, suggest_client):
        suggest_client.client.get.return_value = Mock(status_code=200, text="<html>nope</html>")

        assert await suggest_client.get_search_suggestions("cat") == []

    @pytest.mark.asyncio
    async def test_missing_second_element_returns_empty(self, suggest_client):
        suggest_client.client.get.return_value = Mock(status_code=200, text='["cat"]')

        assert await suggest_client.get_search_suggestions("cat") == []
