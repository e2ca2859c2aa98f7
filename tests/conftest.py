"""Pytest fixtures for galaxy-sync tests."""

from collections.abc import Callable

import pytest

from galaxy_sync.config.settings import Settings
from galaxy_sync.config.sources import GithubSourceConfig, GitlabSourceConfig, ScheduleConfig
from galaxy_sync.scm.base import ScmClient, ScmClientConfig
from galaxy_sync.scm.schemas import DirectoryEntry, RepositoryInfo

GALAXY_YML = """\
namespace: acme
name: network
version: 1.2.0
readme: README.md
authors:
  - Jane Doe <jane@example.com>
description: Network automation for acme devices
license:
  - GPL-3.0-or-later
tags: [networking, acme]
dependencies:
  ansible.netcommon: ">=2.0.0"
  ansible.utils: "*"
repository: https://github.com/acme/network
"""


class FakeScmClient(ScmClient):
    """
    In-memory SCM client.

    ``trees`` maps ``(full_path, ref)`` to ``{path: content}``; directories
    are derived from the file paths. ``failing`` repositories raise on
    every call.
    """

    def __init__(
        self,
        repositories: list[RepositoryInfo] | None = None,
        trees: dict[tuple[str, str], dict[str, str]] | None = None,
        branches: dict[str, list[str]] | None = None,
        tags: dict[str, list[str]] | None = None,
        failing: set[str] | None = None,
        scm_provider: str = "github",
        host: str = "github.com",
        organization: str = "acme",
    ):
        super().__init__(ScmClientConfig(scm_provider, host, organization, "token"))
        self.repositories = repositories or []
        self.trees = trees or {}
        self.branches = branches or {}
        self.tags = tags or {}
        self.failing = failing or set()
        self.listed_directories: list[tuple[str, str, str]] = []

    def _auth_headers(self) -> dict[str, str]:
        return {}

    def _check(self, repository: RepositoryInfo) -> None:
        if repository.full_path in self.failing:
            raise RuntimeError(f"boom in {repository.full_path}")

    async def list_repositories(self, organization: str | None = None) -> list[RepositoryInfo]:
        return list(self.repositories)

    async def list_branches(self, repository: RepositoryInfo) -> list[str]:
        self._check(repository)
        return self.branches.get(repository.full_path, [repository.default_branch])

    async def list_tags(self, repository: RepositoryInfo) -> list[str]:
        self._check(repository)
        return self.tags.get(repository.full_path, [])

    async def list_directory(
        self, repository: RepositoryInfo, ref: str, path: str = ""
    ) -> list[DirectoryEntry]:
        self._check(repository)
        self.listed_directories.append((repository.full_path, ref, path))
        prefix = f"{path}/" if path else ""
        entries: dict[str, DirectoryEntry] = {}
        for file_path in self.trees.get((repository.full_path, ref), {}):
            if not file_path.startswith(prefix):
                continue
            head, _, rest = file_path[len(prefix):].partition("/")
            entry_type = "dir" if rest else "file"
            entries[head] = DirectoryEntry(name=head, path=f"{prefix}{head}", type=entry_type)
        return list(entries.values())

    async def read_file(self, repository: RepositoryInfo, ref: str, path: str) -> str | None:
        self._check(repository)
        return self.trees.get((repository.full_path, ref), {}).get(path)

    def build_source_location(self, repository: RepositoryInfo, ref: str, path: str) -> str:
        base = f"https://{self.host}/{repository.full_path}/tree/{ref}"
        return f"url:{base}/{path}" if path else f"url:{base}"

    def _next_page(self, response, url, params):
        return None, {}


def make_repository(name: str, org: str = "acme", default_branch: str = "main") -> RepositoryInfo:
    return RepositoryInfo(
        name=name,
        full_path=f"{org}/{name}",
        default_branch=default_branch,
        url=f"https://github.com/{org}/{name}",
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        aap_base_url=None,
        aap_token=None,
        api_keys=None,
    )


@pytest.fixture
def galaxy_yml() -> str:
    return GALAXY_YML


@pytest.fixture
def fake_client_cls() -> type[FakeScmClient]:
    return FakeScmClient


@pytest.fixture
def repository_factory() -> Callable[..., RepositoryInfo]:
    return make_repository


@pytest.fixture
def github_source() -> GithubSourceConfig:
    return GithubSourceConfig(
        host="github.com",
        host_name="github-public",
        organization="acme",
        env="development",
        schedule=ScheduleConfig(frequency_seconds=60, timeout_seconds=30),
    )


@pytest.fixture
def gitlab_source() -> GitlabSourceConfig:
    return GitlabSourceConfig(
        host="gitlab.example.com",
        host_name="internal-gitlab",
        organization="platform/ansible",
        env="production",
    )
