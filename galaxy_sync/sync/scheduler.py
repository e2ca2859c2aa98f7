"""
Sync scheduler.

Runs every enabled sync source on its own interval as a named asyncio
task (``<source_id>:run``), and starts on-demand syncs for the sources
selected by a trigger request. Sources run independently: one source's
failure or timeout never delays another.
"""

import asyncio

import structlog

from galaxy_sync.catalog.sink import CatalogSink
from galaxy_sync.config.settings import Settings
from galaxy_sync.config.sources import SyncConfig
from galaxy_sync.scm.factory import ScmClientFactory
from galaxy_sync.scm.http_client import RetryConfig
from galaxy_sync.sync.filters import SyncFilter, source_matches_filter, validate_sync_filter
from galaxy_sync.sync.schemas import (
    INVALID_FILTER,
    INVALID_REPOSITORY,
    SYNC_START_FAILED,
    SyncError,
    SyncResult,
    TriggerOutcome,
)
from galaxy_sync.sync.sources import GitContentsSyncSource, HubCollectionSyncSource, SyncSource
from galaxy_sync.sync.state_store import SyncStateStore

logger = structlog.get_logger(__name__)


class SyncScheduler:
    """
    Owns the periodic sync tasks and the trigger entry points.

    Usage:
        scheduler = SyncScheduler(scm_sources, hub_sources, store)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        scm_sources: list[GitContentsSyncSource],
        hub_sources: list[HubCollectionSyncSource] | None = None,
        store: SyncStateStore | None = None,
    ):
        self.scm_sources = list(scm_sources)
        self.hub_sources = list(hub_sources or [])
        self.store = store or SyncStateStore()
        self._tasks: list[asyncio.Task] = []
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def _all_sources(self) -> list[SyncSource]:
        return [*self.scm_sources, *self.hub_sources]

    async def start(self) -> None:
        """Start one periodic task per enabled source and return."""
        if self._running:
            return
        self._running = True

        for source in self._all_sources():
            if not source.enabled:
                logger.info("Source disabled, not scheduling", source_id=source.source_id)
                continue
            self._tasks.append(
                asyncio.create_task(self._run_periodically(source), name=f"{source.source_id}:run")
            )

        logger.info("Scheduler started", tasks=len(self._tasks))

    async def stop(self) -> None:
        """Cancel periodic tasks and wait for them to exit."""
        logger.info("Stopping scheduler")
        self._running = False

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        for source in self._all_sources():
            await source.wait_for_background()

    async def _run_periodically(self, source: SyncSource) -> None:
        schedule = source.schedule
        logger.info(
            "Scheduling source",
            source_id=source.source_id,
            frequency_seconds=schedule.frequency_seconds,
            timeout_seconds=schedule.timeout_seconds,
        )
        if schedule.initial_delay_seconds:
            await asyncio.sleep(schedule.initial_delay_seconds)

        while self._running:
            try:
                await source.run()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Scheduled sync error", source_id=source.source_id, error=str(e))

            await asyncio.sleep(schedule.frequency_seconds)

    async def run_all_once(self) -> dict[str, bool]:
        """Run every enabled source once, concurrently, and report success per source id."""
        sources = [s for s in self._all_sources() if s.enabled]
        outcomes = await asyncio.gather(*(s.run() for s in sources))
        return {s.source_id: ok for s, ok in zip(sources, outcomes)}

    def select_scm_sources(
        self, filters: list[SyncFilter]
    ) -> tuple[list[GitContentsSyncSource], list[SyncResult]]:
        """
        Resolve filters into sources to sync plus ``invalid`` results.

        No filters selects every source.
        """
        if not filters:
            return list(self.scm_sources), []

        selected: dict[str, GitContentsSyncSource] = {}
        invalid: list[SyncResult] = []

        for sync_filter in filters:
            error = validate_sync_filter(sync_filter)
            if error is None:
                matches = [s for s in self.scm_sources if source_matches_filter(s.source, sync_filter)]
                if not matches:
                    error = "No configured sources match filter"
                for source in matches:
                    selected.setdefault(source.source_id, source)
            if error is not None:
                invalid.append(
                    SyncResult(
                        status="invalid",
                        scm_provider=sync_filter.scm_provider,
                        host_name=sync_filter.host_name,
                        organization=sync_filter.organization,
                        error=SyncError(code=INVALID_FILTER, message=error),
                    )
                )

        return list(selected.values()), invalid

    async def _start(self, source: SyncSource, result: SyncResult) -> SyncResult:
        outcome = await source.start_sync()

        if outcome.skipped:
            logger.info(f"Skipping sync for {source.source_id}: sync already in progress")
            result.status = "already_syncing"
        elif not outcome.started:
            logger.error(f"Failed to start sync for {source.source_id}: {outcome.error or 'unknown error'}")
            result.status = "failed"
            result.error = SyncError(
                code=SYNC_START_FAILED,
                message=outcome.error or "Failed to initiate sync for provider",
            )
        return result

    async def trigger_scm(self, filters: list[SyncFilter]) -> TriggerOutcome:
        """Start syncs for the SCM sources matching ``filters``."""
        sources, invalid = self.select_scm_sources(filters)
        logger.info(
            "Starting Ansible Git Contents sync for: "
            + (", ".join(s.source_id for s in sources) or "none")
        )

        results = []
        for source in sources:
            results.append(
                await self._start(
                    source,
                    SyncResult(
                        status="sync_started",
                        scm_provider=source.source.scm_provider,
                        host_name=source.source.host,
                        organization=source.source.organization,
                        provider_name=source.provider_name,
                        source_id=source.source_id,
                    ),
                )
            )

        return TriggerOutcome(
            results=results + invalid,
            empty_request=not filters and not self.scm_sources,
        )

    async def trigger_hub(self, repository_names: list[str]) -> TriggerOutcome:
        """Start syncs for the named hub repositories (all when none are named)."""
        by_name = {s.repository_name: s for s in self.hub_sources}
        invalid: list[SyncResult] = []

        if repository_names:
            sources = []
            for name in repository_names:
                if name in by_name:
                    sources.append(by_name[name])
                else:
                    invalid.append(
                        SyncResult(
                            status="invalid",
                            repository_name=name,
                            error=SyncError(
                                code=INVALID_REPOSITORY,
                                message=f"Repository '{name}' not found in configured providers",
                            ),
                        )
                    )
        else:
            sources = list(self.hub_sources)

        logger.info(
            "Starting hub collections sync for repository name(s): "
            + (", ".join(s.repository_name for s in sources) or "none")
        )

        results = []
        for source in sources:
            results.append(
                await self._start(
                    source,
                    SyncResult(
                        status="sync_started",
                        repository_name=source.repository_name,
                        provider_name=source.provider_name,
                        source_id=source.source_id,
                    ),
                )
            )

        return TriggerOutcome(
            results=results + invalid,
            empty_request=not repository_names and not self.hub_sources,
        )


def build_client_factory(config: SyncConfig, settings: Settings) -> ScmClientFactory:
    return ScmClientFactory(
        config.integrations,
        retry_config=RetryConfig(
            max_retries=settings.max_http_retries,
            max_backoff_seconds=settings.max_backoff_seconds,
        ),
        timeout=settings.http_timeout_seconds,
    )


def build_scheduler(
    config: SyncConfig,
    settings: Settings,
    sink: CatalogSink,
    store: SyncStateStore | None = None,
    client_factory: ScmClientFactory | None = None,
) -> SyncScheduler:
    """Create sync sources for everything in the sources file and wrap them in a scheduler."""
    store = store or SyncStateStore()
    factory = client_factory or build_client_factory(config, settings)

    scm_sources = [
        GitContentsSyncSource(
            source,
            factory,
            store,
            sink=sink,
            batch_size=settings.repository_batch_size,
            concurrency=settings.crawler_concurrency,
        )
        for source in config.source_configs()
    ]

    hub_sources: list[HubCollectionSyncSource] = []
    if config.hub and config.hub.repositories:
        if settings.aap_configured:
            hub_sources = [
                HubCollectionSyncSource(
                    name,
                    settings.aap_base_url,
                    settings.aap_token,
                    store,
                    config.hub.schedule,
                    sink=sink,
                    env=config.hub.env,
                    check_ssl=settings.aap_check_ssl,
                )
                for name in config.hub.repositories
            ]
        else:
            logger.warning("Hub repositories configured but AAP_BASE_URL/AAP_TOKEN not set, skipping them")

    return SyncScheduler(scm_sources, hub_sources, store)
