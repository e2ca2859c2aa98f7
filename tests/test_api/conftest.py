"""Shared fixtures for API tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from galaxy_sync.api.app import create_app
from galaxy_sync.api.auth import verify_api_key
from galaxy_sync.api.dependencies import (
    get_client_factory,
    get_scheduler,
    get_state_store,
    get_subscription_service,
)
from galaxy_sync.catalog.sink import InMemoryCatalogSink
from galaxy_sync.config.sources import GithubSourceConfig, GitlabSourceConfig, ScheduleConfig
from galaxy_sync.subscription.service import SubscriptionStatus
from galaxy_sync.sync.scheduler import SyncScheduler
from galaxy_sync.sync.schemas import StartSyncResult
from galaxy_sync.sync.sources import GitContentsSyncSource, HubCollectionSyncSource
from galaxy_sync.sync.state_store import SyncStateStore

GITHUB_SOURCE_ID = "development:github:github-com:acme"
GITLAB_SOURCE_ID = "production:gitlab:gitlab-example-com:platform"
HUB_SOURCE_ID = "development:pah:validated"

STARTED = StartSyncResult(started=True, skipped=False)


@pytest.fixture
def state_store() -> SyncStateStore:
    return SyncStateStore()


@pytest.fixture
def scheduler(state_store) -> SyncScheduler:
    """Scheduler over two SCM sources and one hub repository whose starts always succeed."""
    sink = InMemoryCatalogSink()
    github = GitContentsSyncSource(
        GithubSourceConfig(host="github.com", host_name="github-public", organization="acme"),
        MagicMock(),
        state_store,
        sink=sink,
    )
    gitlab = GitContentsSyncSource(
        GitlabSourceConfig(
            host="gitlab.example.com",
            host_name="internal-gitlab",
            organization="platform",
            env="production",
        ),
        MagicMock(),
        state_store,
        sink=sink,
    )
    hub = HubCollectionSyncSource(
        "validated", "https://aap.example.com", "token", state_store, ScheduleConfig(), sink=sink
    )
    for source in (github, gitlab, hub):
        source.start_sync = AsyncMock(return_value=STARTED)
    return SyncScheduler([github, gitlab], [hub], state_store)


@pytest.fixture
def mock_subscription_service():
    service = MagicMock()
    service.status = SubscriptionStatus(
        is_valid=True, status_code=200, checked_at=datetime.now(timezone.utc)
    )
    service.check = AsyncMock()
    return service


@pytest.fixture
def mock_client_factory():
    return MagicMock()


@pytest.fixture
def app(scheduler, state_store, mock_subscription_service, mock_client_factory):
    """App with every dependency overridden; lifespan does not run."""
    app = create_app()
    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    app.dependency_overrides[get_state_store] = lambda: state_store
    app.dependency_overrides[get_subscription_service] = lambda: mock_subscription_service
    app.dependency_overrides[get_client_factory] = lambda: mock_client_factory
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
