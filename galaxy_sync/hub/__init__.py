"""Automation hub collection listing."""

from galaxy_sync.hub.client import HubClient

__all__ = ["HubClient"]
