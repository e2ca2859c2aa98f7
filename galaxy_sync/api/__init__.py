"""FastAPI service exposing sync status, sync triggers and the subscription check."""

from galaxy_sync.api.app import create_app

__all__ = ["create_app"]
