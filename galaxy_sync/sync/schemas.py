"""Sync state records and trigger results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

SyncRunStatus = Literal["success", "failure"]
SyncResultStatus = Literal["sync_started", "already_syncing", "failed", "invalid"]

SYNC_START_FAILED = "SYNC_START_FAILED"
INVALID_FILTER = "INVALID_FILTER"
INVALID_REPOSITORY = "INVALID_REPOSITORY"


@dataclass
class SyncStatus:
    """
    Per-source sync state.

    ``collections_delta`` is the change in ``collections_found`` between the
    last two successful runs; on the first successful run it equals the count.
    """

    source_id: str
    sync_in_progress: bool = False
    last_sync_time: datetime | None = None
    last_failed_sync_time: datetime | None = None
    last_sync_status: SyncRunStatus | None = None
    collections_found: int = 0
    collections_delta: int = 0


@dataclass(frozen=True)
class StartSyncResult:
    started: bool
    skipped: bool
    error: str | None = None


@dataclass(frozen=True)
class SyncError:
    code: str
    message: str


@dataclass
class SyncResult:
    """Outcome of asking one source (or one invalid request entry) to sync."""

    status: SyncResultStatus
    scm_provider: str | None = None
    host_name: str | None = None
    organization: str | None = None
    repository_name: str | None = None
    provider_name: str | None = None
    source_id: str | None = None
    error: SyncError | None = None


@dataclass
class TriggerOutcome:
    """All results of one trigger request plus the HTTP status they map to."""

    results: list[SyncResult] = field(default_factory=list)
    empty_request: bool = False

    def count(self, status: SyncResultStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "sync_started": self.count("sync_started"),
            "already_syncing": self.count("already_syncing"),
            "failed": self.count("failed"),
            "invalid": self.count("invalid"),
        }

    @property
    def status_code(self) -> int:
        """
        400 when everything is invalid, nothing is configured, or invalid
        entries are mixed only with failures; 500 when every sync failed to
        start; 202 when all started; 200 when all were already running;
        207 for any other mix.
        """
        total = len(self.results)
        started = self.count("sync_started")
        skipped = self.count("already_syncing")
        failed = self.count("failed")
        invalid = self.count("invalid")

        if (total and invalid == total) or self.empty_request or (invalid and failed and not started):
            return 400
        if total and failed == total:
            return 500
        if total and started == total:
            return 202
        if total and skipped == total:
            return 200
        return 207
