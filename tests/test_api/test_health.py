"""Tests for the health and root endpoints."""

from galaxy_sync import __version__


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_root(self, client):
        data = client.get("/").json()

        assert data["version"] == __version__
        assert data["docs"] == "/docs"

    def test_request_id_echoed(self, client):
        """Should echo X-Request-ID back on the response."""
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client):
        response = client.get("/health")

        assert response.headers["X-Request-ID"]
