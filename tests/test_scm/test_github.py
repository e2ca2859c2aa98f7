"""Tests for the GitHub client."""

import base64

import httpx
import pytest
import respx

from galaxy_sync.errors import TransientFetchError
from galaxy_sync.scm.base import ScmClientConfig
from galaxy_sync.scm.github import GithubClient
from galaxy_sync.scm.http_client import RetryConfig
from galaxy_sync.scm.schemas import RepositoryInfo

API = "https://api.github.com"
REPOSITORY = RepositoryInfo("net", "acme/net", "main", "https://github.com/acme/net")


def _client(host: str = "github.com", api_base_url: str | None = None) -> GithubClient:
    return GithubClient(
        ScmClientConfig("github", host, "acme", "ghp-token", api_base_url),
        retry_config=RetryConfig(max_retries=0),
    )


def _repo_json(name: str, default_branch: str = "main") -> dict:
    return {
        "name": name,
        "full_name": f"acme/{name}",
        "default_branch": default_branch,
        "html_url": f"https://github.com/acme/{name}",
        "description": None,
    }


class TestApiUrl:
    """Tests for API base URL resolution."""

    def test_public_github(self):
        assert _client().api_url == "https://api.github.com"

    def test_enterprise_host(self):
        assert _client("github.example.com").api_url == "https://github.example.com/api/v3"

    def test_explicit_base_url(self):
        assert _client(api_base_url="https://proxy.example.com/gh/").api_url == "https://proxy.example.com/gh"


class TestListRepositories:
    """Tests for GithubClient.list_repositories."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_follows_link_pagination(self):
        """Should follow rel=next links until exhausted."""
        respx.get(f"{API}/orgs/acme/repos").mock(
            return_value=httpx.Response(
                200,
                json=[_repo_json("one")],
                headers={"Link": f'<{API}/organizations/1/repos?page=2>; rel="next"'},
            )
        )
        respx.get(f"{API}/organizations/1/repos").mock(
            return_value=httpx.Response(200, json=[_repo_json("two", "devel")])
        )

        async with _client() as client:
            repos = await client.list_repositories()

        assert [r.full_path for r in repos] == ["acme/one", "acme/two"]
        assert repos[1].default_branch == "devel"

    @pytest.mark.asyncio
    @respx.mock
    async def test_falls_back_to_user_repos(self):
        """Should list user repositories when the org does not exist."""
        respx.get(f"{API}/orgs/acme/repos").mock(return_value=httpx.Response(404))
        respx.get(f"{API}/users/acme/repos").mock(return_value=httpx.Response(200, json=[_repo_json("solo")]))

        async with _client() as client:
            repos = await client.list_repositories()

        assert [r.name for r in repos] == ["solo"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_is_transient(self):
        """Should raise TransientFetchError for non-404 failures."""
        respx.get(f"{API}/orgs/acme/repos").mock(return_value=httpx.Response(500))

        async with _client() as client:
            with pytest.raises(TransientFetchError) as exc_info:
                await client.list_repositories()

        assert exc_info.value.status_code == 500


class TestContents:
    """Tests for directory listing and file reads."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_directory(self):
        route = respx.get(f"{API}/repos/acme/net/contents/collections").mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"name": "galaxy.yml", "path": "collections/galaxy.yml", "type": "file"},
                    {"name": "plugins", "path": "collections/plugins", "type": "dir"},
                    {"name": "link", "path": "collections/link", "type": "symlink"},
                ],
            )
        )

        async with _client() as client:
            entries = await client.list_directory(REPOSITORY, "main", "collections")

        assert [(e.name, e.type) for e in entries] == [("galaxy.yml", "file"), ("plugins", "dir")]
        assert route.calls.last.request.url.params["ref"] == "main"

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_missing_directory_is_empty(self):
        respx.get(f"{API}/repos/acme/net/contents/nope").mock(return_value=httpx.Response(404))

        async with _client() as client:
            assert await client.list_directory(REPOSITORY, "main", "nope") == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_read_file_decodes_base64(self):
        encoded = base64.b64encode(b"namespace: acme\n").decode()
        respx.get(f"{API}/repos/acme/net/contents/galaxy.yml").mock(
            return_value=httpx.Response(200, json={"type": "file", "encoding": "base64", "content": encoded})
        )

        async with _client() as client:
            content = await client.read_file(REPOSITORY, "v1.0.0", "galaxy.yml")

        assert content == "namespace: acme\n"

    @pytest.mark.asyncio
    @respx.mock
    async def test_read_missing_file_is_none(self):
        respx.get(f"{API}/repos/acme/net/contents/galaxy.yml").mock(return_value=httpx.Response(404))

        async with _client() as client:
            assert await client.read_file(REPOSITORY, "main", "galaxy.yml") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_refs_default_branch_first(self):
        """Should list the default branch first, then other branches, then tags."""
        respx.get(f"{API}/repos/acme/net/branches").mock(
            return_value=httpx.Response(200, json=[{"name": "devel"}, {"name": "main"}])
        )
        respx.get(f"{API}/repos/acme/net/tags").mock(
            return_value=httpx.Response(200, json=[{"name": "v1.0.0"}])
        )

        async with _client() as client:
            refs = await client.list_refs(REPOSITORY)

        assert [(r.name, r.ref_type) for r in refs] == [
            ("main", "branch"),
            ("devel", "branch"),
            ("v1.0.0", "tag"),
        ]

    def test_source_location(self):
        assert _client().build_source_location(REPOSITORY, "main", "collections/net") == (
            "url:https://github.com/acme/net/tree/main/collections/net"
        )
        assert _client().build_source_location(REPOSITORY, "main", "") == (
            "url:https://github.com/acme/net/tree/main"
        )
