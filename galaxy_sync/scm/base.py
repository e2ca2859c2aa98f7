"""
Base class for SCM clients.

Each provider client maps its REST API onto the same small read-only
surface: repositories in an organization, refs of a repository, directory
listings and file contents at a ref.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from galaxy_sync.errors import TransientFetchError
from galaxy_sync.scm.http_client import HTTPClient, HTTPClientError, NotFoundError, RetryConfig
from galaxy_sync.scm.schemas import DirectoryEntry, RepositoryInfo, RepositoryRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScmClientConfig:
    scm_provider: str
    host: str
    organization: str
    token: str
    api_base_url: str | None = None


class ScmClient(ABC):
    """
    Abstract base class for SCM provider clients.

    Subclasses implement the provider-specific listing and reading calls.
    Not-found responses are turned into empty results or None; every other
    HTTP failure is raised as TransientFetchError.

    Usage:
        async with factory.create_client("github", "ansible") as client:
            repos = await client.list_repositories()
    """

    def __init__(
        self,
        config: ScmClientConfig,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
        http_client: HTTPClient | None = None,
    ):
        self.config = config
        self._http = http_client or HTTPClient(
            retry_config=retry_config,
            timeout=timeout,
            headers=self._auth_headers(),
        )

    async def __aenter__(self) -> "ScmClient":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._http.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def scm_provider(self) -> str:
        return self.config.scm_provider

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def organization(self) -> str:
        return self.config.organization

    @abstractmethod
    def _auth_headers(self) -> dict[str, str]:
        """Headers that authenticate every request."""

    @abstractmethod
    async def list_repositories(self, organization: str | None = None) -> list[RepositoryInfo]:
        """List repositories in the organization (defaults to the configured one)."""

    @abstractmethod
    async def list_branches(self, repository: RepositoryInfo) -> list[str]:
        pass

    @abstractmethod
    async def list_tags(self, repository: RepositoryInfo) -> list[str]:
        pass

    @abstractmethod
    async def list_directory(
        self, repository: RepositoryInfo, ref: str, path: str = ""
    ) -> list[DirectoryEntry]:
        """List a directory at a ref. Missing directories yield an empty list."""

    @abstractmethod
    async def read_file(self, repository: RepositoryInfo, ref: str, path: str) -> str | None:
        """Read a file at a ref. Returns None if the file does not exist."""

    @abstractmethod
    def build_source_location(self, repository: RepositoryInfo, ref: str, path: str) -> str:
        """Catalog source-location (``url:...``) of a directory at a ref."""

    async def list_refs(self, repository: RepositoryInfo) -> list[RepositoryRef]:
        """
        All refs of a repository: the default branch first, then the other
        branches, then tags.
        """
        refs = [RepositoryRef(repository.default_branch, "branch")]
        for branch in await self.list_branches(repository):
            if branch != repository.default_branch:
                refs.append(RepositoryRef(branch, "branch"))
        for tag in await self.list_tags(repository):
            refs.append(RepositoryRef(tag, "tag"))
        return refs

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._get(url, params=params)
        return response.json()

    async def _get(self, url: str, params: dict[str, Any] | None = None):
        try:
            return await self._http.get(url, params=params)
        except NotFoundError:
            raise
        except HTTPClientError as e:
            raise TransientFetchError(str(e), status_code=e.status_code) from e

    async def _get_paginated(self, url: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Follow pagination until exhausted and return every item."""
        items: list[Any] = []
        next_url: str | None = url
        next_params = dict(params or {})

        while next_url:
            response = await self._get(next_url, params=next_params)
            page = response.json()
            if isinstance(page, list):
                items.extend(page)
            next_url, next_params = self._next_page(response, next_url, next_params)

        return items

    @abstractmethod
    def _next_page(self, response, url: str, params: dict[str, Any]) -> tuple[str | None, dict[str, Any]]:
        """Return (url, params) of the next page, or (None, {}) when done."""
