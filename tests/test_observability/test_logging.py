"""Tests for logging helpers."""

import structlog

from galaxy_sync.observability.logging import sync_context


class TestSyncContext:
    def test_binds_source_id_inside_block(self):
        """Should bind source_id only while the block runs."""
        with sync_context("development:github:github-com:acme"):
            assert structlog.contextvars.get_contextvars()["source_id"] == (
                "development:github:github-com:acme"
            )

        assert "source_id" not in structlog.contextvars.get_contextvars()

    def test_restores_outer_binding(self):
        structlog.contextvars.bind_contextvars(request_id="req-1")
        try:
            with sync_context("development:pah:validated"):
                assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"
            assert structlog.contextvars.get_contextvars() == {"request_id": "req-1"}
        finally:
            structlog.contextvars.clear_contextvars()
