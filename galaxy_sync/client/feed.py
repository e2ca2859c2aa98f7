"""HTTP client for the sync status feed and trigger endpoints."""

import json
import logging
from typing import Any

from galaxy_sync.scm.http_client import HTTPClient, HTTPClientError, RetryConfig

logger = logging.getLogger(__name__)


class StatusFeedClient:
    """
    Talks to a running galaxy-sync API.

    Usage:
        async with StatusFeedClient("http://localhost:8001") as feed:
            providers = await feed.fetch_status()
            outcome = await feed.trigger_scm([{"scmProvider": "github"}])
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        http_client: HTTPClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {"X-API-KEY": api_key} if api_key else {}
        self._http = http_client or HTTPClient(
            retry_config=RetryConfig(max_retries=0),
            timeout=timeout,
            headers=headers,
        )

    async def __aenter__(self) -> "StatusFeedClient":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._http.__aexit__(exc_type, exc_val, exc_tb)

    async def fetch_status(self) -> list[dict[str, Any]]:
        """Provider statuses, or an empty list if the feed is unreachable."""
        try:
            response = await self._http.get(
                f"{self.base_url}/sync/status", params={"ansible_contents": "true"}
            )
            data = response.json()
        except HTTPClientError as e:
            logger.error(f"Failed to fetch sync status: {e}")
            return []
        except ValueError as e:
            logger.error(f"Error fetching sync status: {e}")
            return []

        return (data.get("content") or {}).get("providers") or []

    async def trigger_scm(self, filters: list[dict[str, str]] | None = None) -> dict[str, Any]:
        return await self._post_trigger("/sync/from-scm/content", {"filters": filters or []})

    async def trigger_hub(self, repository_names: list[str] | None = None) -> dict[str, Any]:
        filters = [{"repository_name": name} for name in repository_names or []]
        return await self._post_trigger("/sync/from-aap/content", {"filters": filters})

    async def _post_trigger(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST a trigger request; 4xx/5xx bodies still carry summary and results."""
        try:
            response = await self._http.post(f"{self.base_url}{path}", json_body=body)
            return response.json()
        except HTTPClientError as e:
            if e.response_body:
                try:
                    return json.loads(e.response_body)
                except ValueError:
                    pass
            raise
