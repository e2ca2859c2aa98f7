"""Automation platform subscription check."""

from galaxy_sync.subscription.service import (
    INVALID_SUBSCRIPTION,
    SubscriptionService,
    SubscriptionStatus,
    classify_subscription_error,
)

__all__ = [
    "INVALID_SUBSCRIPTION",
    "SubscriptionService",
    "SubscriptionStatus",
    "classify_subscription_error",
]
