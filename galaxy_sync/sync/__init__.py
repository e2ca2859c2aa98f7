"""Sync orchestration - sources, scheduler and per-source state."""

from galaxy_sync.sync.filters import SyncFilter, source_matches_filter, validate_sync_filter
from galaxy_sync.sync.scheduler import SyncScheduler, build_client_factory, build_scheduler
from galaxy_sync.sync.schemas import StartSyncResult, SyncResult, SyncStatus, TriggerOutcome
from galaxy_sync.sync.sources import GitContentsSyncSource, HubCollectionSyncSource, SyncSource
from galaxy_sync.sync.state_store import SyncStateStore

__all__ = [
    "GitContentsSyncSource",
    "HubCollectionSyncSource",
    "StartSyncResult",
    "SyncFilter",
    "SyncResult",
    "SyncScheduler",
    "SyncSource",
    "SyncStateStore",
    "SyncStatus",
    "TriggerOutcome",
    "build_client_factory",
    "build_scheduler",
    "source_matches_filter",
    "validate_sync_filter",
]
