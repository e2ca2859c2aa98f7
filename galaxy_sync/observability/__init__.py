"""Observability - structured logging and Prometheus metrics."""

from galaxy_sync.observability.logging import setup_logging, sync_context
from galaxy_sync.observability.metrics import MetricsCollector, get_metrics

__all__ = [
    "MetricsCollector",
    "get_metrics",
    "setup_logging",
    "sync_context",
]
