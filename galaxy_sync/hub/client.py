"""
Automation hub client.

Lists the highest version of every collection in a hub repository
(e.g. ``rh-certified``, ``validated``) through the galaxy v3 search API.
"""

import logging
from typing import Any
from urllib.parse import urljoin

from galaxy_sync.errors import TransientFetchError
from galaxy_sync.scm.http_client import HTTPClient, HTTPClientError, RetryConfig

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/galaxy/v3/plugin/ansible/search/collection-versions/"
PAGE_SIZE = 100


class HubClient:
    """Read-only client for collection versions served by an automation hub."""

    def __init__(
        self,
        base_url: str,
        token: str,
        check_ssl: bool = True,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
        http_client: HTTPClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = http_client or HTTPClient(
            retry_config=retry_config,
            timeout=timeout,
            headers={"Authorization": f"Bearer {token}"},
            verify=check_ssl,
        )

    async def __aenter__(self) -> "HubClient":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._http.__aexit__(exc_type, exc_val, exc_tb)

    async def list_collections(self, repository_name: str) -> list[dict[str, Any]]:
        """
        Highest version of every collection in a repository.

        Returns ``collection_version`` records (namespace, name, version,
        description, tags, dependencies).

        Raises:
            TransientFetchError: If the hub cannot be queried.
        """
        url: str | None = f"{self.base_url}{SEARCH_PATH}"
        params: dict[str, Any] | None = {
            "repository_name": repository_name,
            "is_highest": "true",
            "is_deprecated": "false",
            "limit": PAGE_SIZE,
            "offset": 0,
        }
        collections: list[dict[str, Any]] = []

        while url:
            try:
                response = await self._http.get(url, params=params)
            except HTTPClientError as e:
                raise TransientFetchError(
                    f"Failed to list collections in {repository_name}: {e}",
                    status_code=e.status_code,
                ) from e

            page = response.json()
            for item in page.get("data", []):
                version = item.get("collection_version")
                if version:
                    collections.append(version)

            next_link = (page.get("links") or {}).get("next")
            # next links are relative and already carry the query string
            url = urljoin(self.base_url + "/", next_link) if next_link else None
            params = None

        logger.debug(f"Hub repository {repository_name} holds {len(collections)} collections")
        return collections
