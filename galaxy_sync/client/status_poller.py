"""
Client-side sync status polling.

After a user triggers syncs, the poller tracks the started sources and
watches the status feed until each one finishes, fails or times out,
emitting a notification for every completion or failure.

Polling runs fast (3s) while any source is syncing or any triggered sync
is still tracked, and slow (15s) otherwise. The loop stops when
``stop()`` is called; ``start_tracking`` wakes it up for an immediate poll.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from galaxy_sync.client.notifications import (
    SYNC_COMPLETED_CATEGORY,
    SYNC_FAILED_CATEGORY,
    SYNC_STARTED_CATEGORY,
    NotificationLog,
)

logger = logging.getLogger(__name__)

FAST_POLL_INTERVAL_SECONDS = 3.0
SLOW_POLL_INTERVAL_SECONDS = 15.0
TRACKING_TIMEOUT_SECONDS = 30 * 60.0

ProviderStatus = dict[str, Any]
FetchStatus = Callable[[], Awaitable[list[ProviderStatus]]]


@dataclass(frozen=True)
class StartedSync:
    """A sync the user just triggered, with the status seen at trigger time."""

    source_id: str
    display_name: str
    last_sync_time: str | None = None
    last_failed_sync_time: str | None = None


@dataclass(frozen=True)
class TrackedSync:
    source_id: str
    display_name: str
    started_at: float
    last_sync_time_at_start: str | None
    last_failed_sync_time_at_start: str | None = None


def build_sync_completed_message(
    source_name: str,
    collections_found: int,
    collections_delta: int,
    is_first_sync: bool,
) -> str:
    word = "collection" if collections_found == 1 else "collections"
    message = f"{collections_found} {word} synced from {source_name}"

    if is_first_sync:
        return f"{message}."

    if collections_delta > 0:
        delta_text = f"+{collections_delta} since last sync"
    elif collections_delta < 0:
        delta_text = f"{collections_delta} since last sync"
    else:
        delta_text = "no change since last sync"
    return f"{message} ({delta_text})."


def started_syncs_from_results(
    results: list[dict[str, Any]],
    providers: list[ProviderStatus],
) -> list[StartedSync]:
    """
    StartedSync entries for every ``sync_started`` trigger result, using
    the provider statuses fetched just before the trigger.
    """
    by_id = {p.get("sourceId"): p for p in providers}
    started = []
    for result in results:
        if result.get("status") != "sync_started" or not result.get("sourceId"):
            continue
        provider = by_id.get(result["sourceId"], {})
        started.append(
            StartedSync(
                source_id=result["sourceId"],
                display_name=(
                    result.get("organization")
                    or result.get("repositoryName")
                    or result.get("providerName")
                    or result["sourceId"]
                ),
                last_sync_time=provider.get("lastSyncTime"),
                last_failed_sync_time=provider.get("lastFailedSyncTime"),
            )
        )
    return started


class SyncStatusPoller:
    """
    Tracks triggered syncs until they complete.

    Usage:
        poller = SyncStatusPoller(feed.fetch_status, NotificationLog())
        task = asyncio.create_task(poller.run())
        poller.start_tracking([StartedSync("dev:github:github-com:acme", "acme")])
        ...
        poller.stop()
        await task
    """

    def __init__(
        self,
        fetch_status: FetchStatus,
        notifications: NotificationLog,
        fast_interval: float = FAST_POLL_INTERVAL_SECONDS,
        slow_interval: float = SLOW_POLL_INTERVAL_SECONDS,
        tracking_timeout: float = TRACKING_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch_status = fetch_status
        self._notifications = notifications
        self._fast_interval = fast_interval
        self._slow_interval = slow_interval
        self._tracking_timeout = tracking_timeout
        self._clock = clock

        self._tracked: dict[str, TrackedSync] = {}
        self._checking = False
        self._sync_in_progress = False
        self._stop_event = asyncio.Event()
        self._wake_event = asyncio.Event()

    @property
    def is_sync_in_progress(self) -> bool:
        return self._sync_in_progress

    @property
    def tracked(self) -> dict[str, TrackedSync]:
        return dict(self._tracked)

    def start_tracking(self, syncs: list[StartedSync]) -> None:
        """Track the given syncs and request an immediate poll."""
        now = self._clock()
        for sync in syncs:
            self._tracked[sync.source_id] = TrackedSync(
                source_id=sync.source_id,
                display_name=sync.display_name,
                started_at=now,
                last_sync_time_at_start=sync.last_sync_time,
                last_failed_sync_time_at_start=sync.last_failed_sync_time,
            )
        self._wake_event.set()

    async def check_sync_status(self) -> bool:
        """
        Poll once and resolve tracked syncs.

        Returns whether any source is syncing. A call made while another
        poll is in flight returns False without polling.
        """
        if self._checking:
            return False
        self._checking = True

        try:
            providers = await self._fetch_status()
            any_in_progress = any(p.get("syncInProgress") for p in providers)
            self._sync_in_progress = any_in_progress

            by_id = {p.get("sourceId"): p for p in providers}
            now = self._clock()

            for source_id, tracked in list(self._tracked.items()):
                provider = by_id.get(source_id)
                if provider is None:
                    logger.warning(f"Stopped tracking {tracked.display_name}: source no longer reported")
                    del self._tracked[source_id]
                    continue

                if self._is_finished(provider, tracked):
                    self._notify(provider, tracked)
                    del self._tracked[source_id]
                elif now - tracked.started_at > self._tracking_timeout:
                    logger.warning(f"Notification tracking timed out for {tracked.display_name}")
                    del self._tracked[source_id]

            return any_in_progress
        finally:
            self._checking = False

    @staticmethod
    def _is_finished(provider: ProviderStatus, tracked: TrackedSync) -> bool:
        if provider.get("syncInProgress"):
            return False
        # A failed run leaves lastSyncTime untouched and moves lastFailedSyncTime
        return (
            provider.get("lastSyncTime") != tracked.last_sync_time_at_start
            or provider.get("lastFailedSyncTime") != tracked.last_failed_sync_time_at_start
        )

    def _notify(self, provider: ProviderStatus, tracked: TrackedSync) -> None:
        status = provider.get("lastSyncStatus")
        if status == "success":
            self._notifications.show(
                title="Sync completed",
                description=build_sync_completed_message(
                    tracked.display_name,
                    provider.get("collectionsFound", 0),
                    provider.get("collectionsDelta", 0),
                    is_first_sync=tracked.last_sync_time_at_start is None,
                ),
                severity="success",
                category=SYNC_COMPLETED_CATEGORY,
                dismiss_categories=[SYNC_STARTED_CATEGORY],
            )
        elif status == "failure":
            self._notifications.show(
                title="Sync failed",
                description=f"Failed to sync content from {tracked.display_name}.",
                severity="error",
                category=SYNC_FAILED_CATEGORY,
                dismiss_categories=[SYNC_STARTED_CATEGORY],
                auto_hide_seconds=0,
            )

    def current_interval(self, any_in_progress: bool) -> float:
        """Fast while a sync is running or any triggered sync is still tracked."""
        if any_in_progress or self._sync_in_progress or self._tracked:
            return self._fast_interval
        return self._slow_interval

    async def run(self) -> None:
        """Poll until stop() is called."""
        self._stop_event.clear()
        while not self._stop_event.is_set():
            self._wake_event.clear()
            any_in_progress = await self.check_sync_status()
            self._notifications.expire_due()

            interval = self.current_interval(any_in_progress)
            stop_wait = asyncio.create_task(self._stop_event.wait())
            wake_wait = asyncio.create_task(self._wake_event.wait())
            try:
                await asyncio.wait({stop_wait, wake_wait}, timeout=interval, return_when=asyncio.FIRST_COMPLETED)
            finally:
                stop_wait.cancel()
                wake_wait.cancel()

    def stop(self) -> None:
        self._stop_event.set()
