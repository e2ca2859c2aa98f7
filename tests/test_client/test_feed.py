"""Tests for the status feed client."""

import json

import httpx
import pytest
import respx

from galaxy_sync.client.feed import StatusFeedClient
from galaxy_sync.scm.http_client import HTTPClientError

API_URL = "http://localhost:8001"


class TestStatusFeedClient:
    """Tests for StatusFeedClient."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_status(self):
        route = respx.get(f"{API_URL}/sync/status").mock(
            return_value=httpx.Response(200, json={
                "content": {"syncInProgress": False, "providers": [{"sourceId": "a"}]}
            })
        )

        async with StatusFeedClient(API_URL + "/", api_key="key") as feed:
            providers = await feed.fetch_status()

        assert providers == [{"sourceId": "a"}]
        request = route.calls.last.request
        assert request.url.params["ansible_contents"] == "true"
        assert request.headers["X-API-KEY"] == "key"

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_status_unreachable(self):
        """Should treat an unreachable feed as no providers."""
        respx.get(f"{API_URL}/sync/status").mock(side_effect=httpx.ConnectError("refused"))

        async with StatusFeedClient(API_URL) as feed:
            assert await feed.fetch_status() == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_status_without_content(self):
        respx.get(f"{API_URL}/sync/status").mock(return_value=httpx.Response(200, json={}))

        async with StatusFeedClient(API_URL) as feed:
            assert await feed.fetch_status() == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_trigger_scm(self):
        body = {"summary": {"total": 1, "sync_started": 1}, "results": [{"status": "sync_started"}]}
        route = respx.post(f"{API_URL}/sync/from-scm/content").mock(
            return_value=httpx.Response(202, json=body)
        )

        async with StatusFeedClient(API_URL) as feed:
            outcome = await feed.trigger_scm([{"scmProvider": "github"}])

        assert outcome == body
        assert json.loads(route.calls.last.request.content) == {"filters": [{"scmProvider": "github"}]}

    @pytest.mark.asyncio
    @respx.mock
    async def test_trigger_error_body_is_returned(self):
        """Should return the result body of a 4xx trigger response."""
        body = {"summary": {"total": 1, "invalid": 1}, "results": [{"status": "invalid"}]}
        respx.post(f"{API_URL}/sync/from-aap/content").mock(return_value=httpx.Response(400, json=body))

        async with StatusFeedClient(API_URL) as feed:
            outcome = await feed.trigger_hub(["nope"])

        assert outcome == body

    @pytest.mark.asyncio
    @respx.mock
    async def test_trigger_error_without_body_raises(self):
        respx.post(f"{API_URL}/sync/from-aap/content").mock(return_value=httpx.Response(401, text=""))

        async with StatusFeedClient(API_URL) as feed:
            with pytest.raises(HTTPClientError):
                await feed.trigger_hub()
