"""Tests for GET /git_readme_content."""

from unittest.mock import AsyncMock

from galaxy_sync.errors import NoIntegrationConfiguredError, UnsupportedProviderError

PARAMS = {
    "scmProvider": "github",
    "host": "github.com",
    "owner": "acme",
    "repo": "network",
    "filePath": "README.md",
    "ref": "main",
}


class TestReadmeRoute:
    """Tests for the README passthrough."""

    def test_returns_markdown(self, client, mock_client_factory, fake_client_cls):
        """Should return file content as text/markdown."""
        fake = fake_client_cls(trees={("acme/network", "main"): {"README.md": "# Network\n"}})
        mock_client_factory.create_client.return_value = fake

        response = client.get("/git_readme_content", params=PARAMS)

        assert response.status_code == 200
        assert response.text == "# Network\n"
        assert response.headers["content-type"].startswith("text/markdown")
        mock_client_factory.create_client.assert_called_once_with("github", "acme", "github.com")

    def test_missing_parameters(self, client):
        response = client.get("/git_readme_content", params={"scmProvider": "github", "host": "github.com"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required query parameters: owner, repo, filePath, ref"

    def test_unsupported_provider(self, client, mock_client_factory):
        mock_client_factory.create_client.side_effect = UnsupportedProviderError("bitbucket")

        response = client.get("/git_readme_content", params={**PARAMS, "scmProvider": "bitbucket"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Unsupported SCM provider: bitbucket"

    def test_no_integration(self, client, mock_client_factory):
        mock_client_factory.create_client.side_effect = NoIntegrationConfiguredError(
            "GitHub", "github.com"
        )

        response = client.get("/git_readme_content", params=PARAMS)

        assert response.status_code == 500

    def test_file_not_found(self, client, mock_client_factory, fake_client_cls):
        mock_client_factory.create_client.return_value = fake_client_cls()

        response = client.get("/git_readme_content", params=PARAMS)

        assert response.status_code == 404

    def test_fetch_error(self, client, mock_client_factory, fake_client_cls):
        """Should answer 500 when reading the file fails."""
        fake = fake_client_cls()
        fake.read_file = AsyncMock(side_effect=RuntimeError("upstream down"))
        mock_client_factory.create_client.return_value = fake

        response = client.get("/git_readme_content", params=PARAMS)

        assert response.status_code == 500
        assert response.json()["detail"] == "upstream down"
