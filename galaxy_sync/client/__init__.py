"""Client-side sync status polling and notifications."""

from galaxy_sync.client.feed import StatusFeedClient
from galaxy_sync.client.notifications import (
    SYNC_COMPLETED_CATEGORY,
    SYNC_FAILED_CATEGORY,
    SYNC_STARTED_CATEGORY,
    Notification,
    NotificationDismissed,
    NotificationExpired,
    NotificationInserted,
    NotificationLog,
    replay,
)
from galaxy_sync.client.status_poller import (
    StartedSync,
    SyncStatusPoller,
    TrackedSync,
    build_sync_completed_message,
    started_syncs_from_results,
)

__all__ = [
    "Notification",
    "NotificationDismissed",
    "NotificationExpired",
    "NotificationInserted",
    "NotificationLog",
    "SYNC_COMPLETED_CATEGORY",
    "SYNC_FAILED_CATEGORY",
    "SYNC_STARTED_CATEGORY",
    "StartedSync",
    "StatusFeedClient",
    "SyncStatusPoller",
    "TrackedSync",
    "build_sync_completed_message",
    "replay",
    "started_syncs_from_results",
]
