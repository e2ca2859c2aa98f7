"""
Prometheus metrics for the sync engine.

Tracks sync runs and their duration per source, collections discovered,
crawl errors and subscription check outcomes. Exposed over HTTP for
Prometheus scraping.
"""

import logging

from prometheus_client import Counter, Gauge, Histogram, start_http_server

from galaxy_sync.config.settings import get_settings

logger = logging.getLogger(__name__)

# Sync runs range from seconds to tens of minutes
DURATION_BUCKETS = (1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1800.0)


class MetricsCollector:
    """
    Prometheus metrics collector for galaxy-sync.

    Usage:
        metrics = get_metrics()
        metrics.start_server()
        metrics.record_sync(source_id, "success", duration=12.5, collections=4)
    """

    def __init__(self):
        self.sync_runs = Counter(
            "galaxy_sync_runs_total",
            "Total number of sync runs",
            ["source_type", "status"],  # status: success, failure
        )

        self.sync_duration = Histogram(
            "galaxy_sync_duration_seconds",
            "Duration of sync runs",
            ["source_type"],
            buckets=DURATION_BUCKETS,
        )

        self.collections_found = Gauge(
            "galaxy_sync_collections_found",
            "Collections found by the last successful sync of a source",
            ["source_id"],
        )

        self.syncs_in_progress = Gauge(
            "galaxy_sync_in_progress",
            "Number of sync runs currently in progress",
        )

        self.crawl_errors = Counter(
            "galaxy_sync_crawl_errors_total",
            "Repositories skipped because of crawl errors",
            ["scm_provider"],
        )

        self.subscription_valid = Gauge(
            "galaxy_sync_subscription_valid",
            "1 if the last subscription check found a valid subscription",
        )

        self._server_started = False

    def start_server(self, port: int | None = None) -> None:
        """Start the Prometheus HTTP server (idempotent)."""
        if self._server_started:
            return
        port = port or get_settings().metrics_port
        start_http_server(port)
        self._server_started = True
        logger.info(f"Metrics server started on port {port}")

    def record_sync(
        self,
        source_id: str,
        status: str,
        duration: float,
        collections: int | None = None,
        source_type: str = "scm",
    ) -> None:
        """
        Record the outcome of one sync run.

        Args:
            source_id: Source that ran
            status: "success" or "failure"
            duration: Run time in seconds
            collections: Collections found (successful runs only)
            source_type: "scm" or "hub"
        """
        self.sync_runs.labels(source_type=source_type, status=status).inc()
        self.sync_duration.labels(source_type=source_type).observe(duration)
        if collections is not None:
            self.collections_found.labels(source_id=source_id).set(collections)

    def record_crawl_errors(self, scm_provider: str, count: int) -> None:
        if count > 0:
            self.crawl_errors.labels(scm_provider=scm_provider).inc(count)

    def set_subscription_valid(self, valid: bool) -> None:
        self.subscription_valid.set(1 if valid else 0)


_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
