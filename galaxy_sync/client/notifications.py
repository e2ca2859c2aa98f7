"""
Sync notifications as an append-only event log.

Every change to what the user sees is recorded as an event (insert,
dismiss, expire); the visible list is derived by replaying the retained
events on top of a snapshot that older events have been folded into.
Inserting a notification with ``dismiss_categories`` first records dismiss
events for visible notifications in those categories, so "sync completed"
replaces "sync started" for the same run.
"""

import itertools
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Literal

Severity = Literal["info", "success", "warning", "error"]

SYNC_STARTED_CATEGORY = "sync-started"
SYNC_COMPLETED_CATEGORY = "sync-completed"
SYNC_FAILED_CATEGORY = "sync-failed"

# Seconds before a notification hides itself; 0 keeps it until dismissed
DEFAULT_AUTO_HIDE_SECONDS: dict[str, float] = {
    "info": 15.0,
    "success": 15.0,
    "warning": 15.0,
    "error": 0.0,
}

# Older events are folded into a snapshot of the visible state
MAX_RETAINED_EVENTS = 100


@dataclass(frozen=True)
class Notification:
    id: str
    title: str
    description: str
    severity: Severity
    category: str | None
    auto_hide_seconds: float
    created_at: float


@dataclass(frozen=True)
class NotificationInserted:
    notification: Notification


@dataclass(frozen=True)
class NotificationDismissed:
    notification_id: str


@dataclass(frozen=True)
class NotificationExpired:
    notification_id: str


NotificationEvent = NotificationInserted | NotificationDismissed | NotificationExpired


def _apply(visible: dict[str, Notification], event: NotificationEvent) -> None:
    if isinstance(event, NotificationInserted):
        visible[event.notification.id] = event.notification
    else:
        visible.pop(event.notification_id, None)


def replay(
    events: Iterable[NotificationEvent],
    snapshot: Iterable[Notification] = (),
) -> list[Notification]:
    """Visible notifications after applying ``events`` in order on top of ``snapshot``."""
    visible = {n.id: n for n in snapshot}
    for event in events:
        _apply(visible, event)
    return list(visible.values())


class NotificationLog:
    """
    Records notification events and answers "what is visible now".

    Usage:
        log = NotificationLog()
        log.show("Sync completed", "3 collections synced from acme.", "success",
                 category=SYNC_COMPLETED_CATEGORY,
                 dismiss_categories=[SYNC_STARTED_CATEGORY])
        log.visible
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_events: int = MAX_RETAINED_EVENTS,
    ):
        self._events: list[NotificationEvent] = []
        self._snapshot: dict[str, Notification] = {}
        self._max_events = max_events
        self._clock = clock
        self._ids = itertools.count(1)

    @property
    def events(self) -> list[NotificationEvent]:
        """Events recorded since the last compaction."""
        return list(self._events)

    @property
    def visible(self) -> list[Notification]:
        return replay(self._events, self._snapshot.values())

    def _record(self, event: NotificationEvent) -> None:
        self._events.append(event)
        overflow = len(self._events) - self._max_events
        if overflow > 0:
            for old in self._events[:overflow]:
                _apply(self._snapshot, old)
            del self._events[:overflow]

    def show(
        self,
        title: str,
        description: str,
        severity: Severity = "info",
        category: str | None = None,
        dismiss_categories: Iterable[str] = (),
        auto_hide_seconds: float | None = None,
    ) -> str:
        """Insert a notification and return its id."""
        dismiss = set(dismiss_categories)
        if dismiss:
            for notification in self.visible:
                if notification.category in dismiss:
                    self._record(NotificationDismissed(notification.id))

        notification = Notification(
            id=f"notification-{next(self._ids)}",
            title=title,
            description=description,
            severity=severity,
            category=category,
            auto_hide_seconds=(
                DEFAULT_AUTO_HIDE_SECONDS[severity] if auto_hide_seconds is None else auto_hide_seconds
            ),
            created_at=self._clock(),
        )
        self._record(NotificationInserted(notification))
        return notification.id

    def dismiss(self, notification_id: str) -> None:
        if any(n.id == notification_id for n in self.visible):
            self._record(NotificationDismissed(notification_id))

    def expire_due(self) -> list[str]:
        """Record expiry for every visible notification whose auto-hide time has passed."""
        now = self._clock()
        expired = [
            n.id
            for n in self.visible
            if n.auto_hide_seconds > 0 and now - n.created_at >= n.auto_hide_seconds
        ]
        for nid in expired:
            self._record(NotificationExpired(nid))
        return expired
