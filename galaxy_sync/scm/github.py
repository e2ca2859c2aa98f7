"""
GitHub REST v3 client.

Works against github.com (api.github.com) and GitHub Enterprise
(``https://<host>/api/v3``). File contents come from the contents API,
base64-encoded.
"""

import base64
import logging
from typing import Any
from urllib.parse import quote

from galaxy_sync.scm.base import ScmClient
from galaxy_sync.scm.http_client import NotFoundError
from galaxy_sync.scm.schemas import DirectoryEntry, RepositoryInfo

logger = logging.getLogger(__name__)

PER_PAGE = 100


class GithubClient(ScmClient):
    """SCM client for GitHub organizations (falls back to user accounts)."""

    @property
    def api_url(self) -> str:
        if self.config.api_base_url:
            return self.config.api_base_url.rstrip("/")
        if self.config.host == "github.com":
            return "https://api.github.com"
        return f"https://{self.config.host}/api/v3"

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _next_page(self, response, url: str, params: dict[str, Any]) -> tuple[str | None, dict[str, Any]]:
        next_link = response.links.get("next", {}).get("url")
        # The Link header carries the full query string
        return (next_link, {}) if next_link else (None, {})

    async def list_repositories(self, organization: str | None = None) -> list[RepositoryInfo]:
        org = organization or self.organization
        params = {"per_page": PER_PAGE, "type": "all"}
        try:
            raw = await self._get_paginated(f"{self.api_url}/orgs/{org}/repos", params)
        except NotFoundError:
            logger.debug(f"{org} is not a GitHub organization, listing user repositories")
            raw = await self._get_paginated(f"{self.api_url}/users/{org}/repos", params)

        return [
            RepositoryInfo(
                name=repo["name"],
                full_path=repo["full_name"],
                default_branch=repo.get("default_branch") or "main",
                url=repo.get("html_url") or f"https://{self.host}/{repo['full_name']}",
                description=repo.get("description"),
            )
            for repo in raw
        ]

    async def list_branches(self, repository: RepositoryInfo) -> list[str]:
        raw = await self._get_paginated(
            f"{self.api_url}/repos/{repository.full_path}/branches", {"per_page": PER_PAGE}
        )
        return [branch["name"] for branch in raw]

    async def list_tags(self, repository: RepositoryInfo) -> list[str]:
        raw = await self._get_paginated(
            f"{self.api_url}/repos/{repository.full_path}/tags", {"per_page": PER_PAGE}
        )
        return [tag["name"] for tag in raw]

    def _contents_url(self, repository: RepositoryInfo, path: str) -> str:
        return f"{self.api_url}/repos/{repository.full_path}/contents/{quote(path.strip('/'))}"

    async def list_directory(
        self, repository: RepositoryInfo, ref: str, path: str = ""
    ) -> list[DirectoryEntry]:
        try:
            data = await self._get_json(self._contents_url(repository, path), {"ref": ref})
        except NotFoundError:
            return []

        # A file path returns a single object rather than a listing
        if not isinstance(data, list):
            return []

        return [
            DirectoryEntry(name=item["name"], path=item["path"], type=item["type"])
            for item in data
            if item.get("type") in ("file", "dir")
        ]

    async def read_file(self, repository: RepositoryInfo, ref: str, path: str) -> str | None:
        try:
            data = await self._get_json(self._contents_url(repository, path), {"ref": ref})
        except NotFoundError:
            return None

        if not isinstance(data, dict) or data.get("type") != "file":
            return None
        if data.get("encoding") == "base64":
            return base64.b64decode(data.get("content", "")).decode("utf-8")
        return data.get("content")

    def build_source_location(self, repository: RepositoryInfo, ref: str, path: str) -> str:
        base = f"https://{self.host}/{repository.full_path}/tree/{ref}"
        return f"url:{base}/{path}" if path else f"url:{base}"
