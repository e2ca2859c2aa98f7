"""
In-process sync state store.

Each source id has its own asyncio.Lock, so at most one run per source is
ever marked in progress and state transitions for a source are serialized.
Readers get copies and never observe a half-applied transition.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone

from galaxy_sync.sync.schemas import SyncStatus

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyncStateStore:
    """Keeps one SyncStatus record per source id."""

    def __init__(self) -> None:
        self._states: dict[str, SyncStatus] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def register(self, source_id: str) -> None:
        """Create an empty record for a configured source if it has none."""
        self._states.setdefault(source_id, SyncStatus(source_id=source_id))
        self._locks.setdefault(source_id, asyncio.Lock())

    def _lock_for(self, source_id: str) -> asyncio.Lock:
        self.register(source_id)
        return self._locks[source_id]

    async def try_begin(self, source_id: str) -> bool:
        """Mark a run as started. Returns False if one is already running."""
        async with self._lock_for(source_id):
            state = self._states[source_id]
            if state.sync_in_progress:
                return False
            state.sync_in_progress = True
            return True

    async def complete_success(
        self,
        source_id: str,
        collections_found: int,
        now: datetime | None = None,
    ) -> SyncStatus:
        async with self._lock_for(source_id):
            state = self._states[source_id]
            previous = state.collections_found
            state.sync_in_progress = False
            state.last_sync_time = now or _utc_now()
            state.last_sync_status = "success"
            state.collections_found = collections_found
            state.collections_delta = collections_found - previous
            return replace(state)

    async def complete_failure(self, source_id: str, now: datetime | None = None) -> SyncStatus:
        """Record a failed run. ``last_sync_time`` and counts are left unchanged."""
        async with self._lock_for(source_id):
            state = self._states[source_id]
            state.sync_in_progress = False
            state.last_failed_sync_time = now or _utc_now()
            state.last_sync_status = "failure"
            return replace(state)

    def get(self, source_id: str) -> SyncStatus | None:
        state = self._states.get(source_id)
        return replace(state) if state else None

    def list(self) -> list[SyncStatus]:
        return [replace(state) for state in self._states.values()]

    def any_in_progress(self) -> bool:
        return any(state.sync_in_progress for state in self._states.values())
