"""GitLab REST v4 client (gitlab.com or self-managed)."""

import logging
from typing import Any
from urllib.parse import quote

from galaxy_sync.scm.base import ScmClient
from galaxy_sync.scm.http_client import NotFoundError
from galaxy_sync.scm.schemas import DirectoryEntry, RepositoryInfo

logger = logging.getLogger(__name__)

PER_PAGE = 100

_TREE_TYPES = {"tree": "dir", "blob": "file"}


def _encode(path: str) -> str:
    return quote(path, safe="")


class GitlabClient(ScmClient):
    """SCM client for GitLab groups, including subgroups."""

    @property
    def api_url(self) -> str:
        if self.config.api_base_url:
            return self.config.api_base_url.rstrip("/")
        return f"https://{self.config.host}/api/v4"

    def _auth_headers(self) -> dict[str, str]:
        return {"PRIVATE-TOKEN": self.config.token}

    def _next_page(self, response, url: str, params: dict[str, Any]) -> tuple[str | None, dict[str, Any]]:
        next_page = response.headers.get("X-Next-Page")
        if not next_page:
            return None, {}
        return url, {**params, "page": next_page}

    def _project_url(self, repository: RepositoryInfo) -> str:
        return f"{self.api_url}/projects/{_encode(repository.full_path)}"

    async def list_repositories(self, organization: str | None = None) -> list[RepositoryInfo]:
        group = organization or self.organization
        params = {"per_page": PER_PAGE, "include_subgroups": "true", "archived": "false"}
        try:
            raw = await self._get_paginated(f"{self.api_url}/groups/{_encode(group)}/projects", params)
        except NotFoundError:
            logger.debug(f"{group} is not a GitLab group, listing user projects")
            raw = await self._get_paginated(
                f"{self.api_url}/users/{_encode(group)}/projects", {"per_page": PER_PAGE}
            )

        repositories = []
        for project in raw:
            if project.get("empty_repo"):
                continue
            repositories.append(
                RepositoryInfo(
                    name=project.get("path") or project["name"],
                    full_path=project["path_with_namespace"],
                    default_branch=project.get("default_branch") or "main",
                    url=project.get("web_url") or f"https://{self.host}/{project['path_with_namespace']}",
                    description=project.get("description"),
                )
            )
        return repositories

    async def list_branches(self, repository: RepositoryInfo) -> list[str]:
        raw = await self._get_paginated(
            f"{self._project_url(repository)}/repository/branches", {"per_page": PER_PAGE}
        )
        return [branch["name"] for branch in raw]

    async def list_tags(self, repository: RepositoryInfo) -> list[str]:
        raw = await self._get_paginated(
            f"{self._project_url(repository)}/repository/tags", {"per_page": PER_PAGE}
        )
        return [tag["name"] for tag in raw]

    async def list_directory(
        self, repository: RepositoryInfo, ref: str, path: str = ""
    ) -> list[DirectoryEntry]:
        params: dict[str, Any] = {"ref": ref, "per_page": PER_PAGE}
        if path.strip("/"):
            params["path"] = path.strip("/")
        try:
            raw = await self._get_paginated(f"{self._project_url(repository)}/repository/tree", params)
        except NotFoundError:
            return []

        return [
            DirectoryEntry(name=item["name"], path=item["path"], type=_TREE_TYPES[item["type"]])
            for item in raw
            if item.get("type") in _TREE_TYPES
        ]

    async def read_file(self, repository: RepositoryInfo, ref: str, path: str) -> str | None:
        url = f"{self._project_url(repository)}/repository/files/{_encode(path.strip('/'))}/raw"
        try:
            response = await self._get(url, params={"ref": ref})
        except NotFoundError:
            return None
        return response.text

    def build_source_location(self, repository: RepositoryInfo, ref: str, path: str) -> str:
        base = f"https://{self.host}/{repository.full_path}/-/tree/{ref}"
        return f"url:{base}/{path}" if path else f"url:{base}"
