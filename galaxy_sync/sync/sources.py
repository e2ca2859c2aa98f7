"""
Sync sources - one per configured organization or hub repository.

A sync source runs one discovery pass, upserts what it finds into the
catalog sink and records the outcome in the SyncStateStore. Runs are
started either by the scheduler (``run``) or on demand (``start_sync``,
fire-and-forget).
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections import defaultdict

import structlog

from galaxy_sync.catalog.entities import (
    build_collection_entity,
    build_hub_collection_entity,
    build_repository_entity,
)
from galaxy_sync.catalog.identifiers import (
    Source,
    create_collection_identifier,
    create_collection_key,
    create_repository_key,
    generate_source_id,
    sanitize_name,
)
from galaxy_sync.catalog.sink import CatalogSink, Relation
from galaxy_sync.config.sources import ScheduleConfig
from galaxy_sync.crawler.crawler import GalaxyCrawler
from galaxy_sync.crawler.schemas import DiscoveryOptions
from galaxy_sync.hub.client import HubClient
from galaxy_sync.observability.logging import sync_context
from galaxy_sync.observability.metrics import get_metrics
from galaxy_sync.scm.factory import ScmClientFactory
from galaxy_sync.sync.schemas import StartSyncResult
from galaxy_sync.sync.state_store import SyncStateStore

logger = structlog.get_logger(__name__)

NOT_CONNECTED = "Provider not connected"


class SyncSource(ABC):
    """
    Base class for anything the scheduler can run.

    Subclasses implement ``_sync`` and return the number of collections
    found; the base class handles state transitions, the run timeout,
    metrics and fire-and-forget starts.
    """

    source_type = "scm"

    def __init__(
        self,
        store: SyncStateStore,
        schedule: ScheduleConfig,
        sink: CatalogSink | None = None,
        enabled: bool = True,
    ):
        self._store = store
        self._sink = sink
        self.schedule = schedule
        self.enabled = enabled
        self._background_tasks: set[asyncio.Task] = set()
        store.register(self.source_id)

    @property
    @abstractmethod
    def source_id(self) -> str:
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    async def _sync(self, sink: CatalogSink) -> int:
        """Run one discovery pass and return the number of collections found."""

    def connect(self, sink: CatalogSink) -> None:
        self._sink = sink

    @property
    def is_syncing(self) -> bool:
        state = self._store.get(self.source_id)
        return bool(state and state.sync_in_progress)

    async def start_sync(self) -> StartSyncResult:
        """
        Start a run in the background and return immediately.

        Skipped if a run is already in progress for this source.
        """
        if self._sink is None:
            return StartSyncResult(started=False, skipped=False, error=NOT_CONNECTED)
        if not await self._store.try_begin(self.source_id):
            return StartSyncResult(started=False, skipped=True)

        task = asyncio.create_task(self._execute(), name=f"{self.source_id}:manual")
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return StartSyncResult(started=True, skipped=False)

    async def run(self) -> bool:
        """
        Run one sync to completion.

        Returns True on success, False on failure or if a run is already
        in progress.
        """
        if self._sink is None:
            logger.error("Sync source not connected to a catalog sink", source_id=self.source_id)
            return False
        if not await self._store.try_begin(self.source_id):
            logger.info("Sync already in progress, skipping", source_id=self.source_id)
            return False
        return await self._execute()

    async def _execute(self) -> bool:
        with sync_context(self.source_id):
            return await self._timed_run()

    async def _timed_run(self) -> bool:
        metrics = get_metrics()
        metrics.syncs_in_progress.inc()
        start_time = time.monotonic()
        logger.info("Sync started")

        try:
            collections = await asyncio.wait_for(
                self._sync(self._sink), timeout=self.schedule.timeout_seconds
            )
        except asyncio.CancelledError:
            await self._store.complete_failure(self.source_id)
            raise
        except Exception as e:
            duration = time.monotonic() - start_time
            await self._store.complete_failure(self.source_id)
            metrics.record_sync(self.source_id, "failure", duration, source_type=self.source_type)
            logger.error(
                "Sync failed",
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
            )
            return False
        finally:
            metrics.syncs_in_progress.dec()

        duration = time.monotonic() - start_time
        status = await self._store.complete_success(self.source_id, collections)
        metrics.record_sync(
            self.source_id, "success", duration, collections=collections, source_type=self.source_type
        )
        logger.info(
            "Sync completed",
            collections=collections,
            delta=status.collections_delta,
            elapsed_seconds=round(duration, 2),
        )
        return True

    async def wait_for_background(self) -> None:
        """Wait for any fire-and-forget runs to finish."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)


class GitContentsSyncSource(SyncSource):
    """Discovers collections in one SCM organization."""

    def __init__(
        self,
        source: Source,
        client_factory: ScmClientFactory,
        store: SyncStateStore,
        sink: CatalogSink | None = None,
        batch_size: int = 20,
        concurrency: int = 5,
    ):
        self.source = source
        self._client_factory = client_factory
        self._batch_size = max(1, batch_size)
        self._concurrency = concurrency
        super().__init__(store, source.schedule, sink=sink, enabled=source.enabled)

    @property
    def source_id(self) -> str:
        return generate_source_id(self.source)

    @property
    def provider_name(self) -> str:
        return self.source.host_name

    @property
    def discovery_options(self) -> DiscoveryOptions:
        return DiscoveryOptions(
            branches=self.source.branches,
            tags=self.source.tags,
            galaxy_file_paths=self.source.galaxy_file_paths,
            crawl_depth=self.source.crawl_depth,
        )

    async def _sync(self, sink: CatalogSink) -> int:
        # Configuration errors raise here and fail only this source
        client = self._client_factory.create_client(
            self.source.scm_provider, self.source.organization, self.source.host
        )
        seen_keys: set[str] = set()

        async with client:
            crawler = GalaxyCrawler(client, self.discovery_options, concurrency=self._concurrency)
            repositories = await client.list_repositories()
            logger.info("Repositories listed", repositories=len(repositories))

            for start in range(0, len(repositories), self._batch_size):
                batch = repositories[start:start + self._batch_size]
                repo_collections: dict[str, list[str]] = defaultdict(list)

                async for galaxy_file in crawler.discover_in_repositories(batch):
                    key = create_collection_key(
                        create_collection_identifier(galaxy_file.metadata, self.source)
                    )
                    if key in seen_keys:
                        logger.debug("Duplicate collection skipped", key=key, ref=galaxy_file.ref)
                        continue
                    seen_keys.add(key)

                    directory = galaxy_file.path.rpartition("/")[0]
                    entity = build_collection_entity(
                        galaxy_file,
                        self.source,
                        client.build_source_location(galaxy_file.repository, galaxy_file.ref, directory),
                    )
                    await self._upsert_with_relations(sink, key, entity)
                    repo_collections[galaxy_file.repository.full_path].append(entity["metadata"]["name"])

                for repository in batch:
                    names = repo_collections.get(repository.full_path)
                    if not names:
                        continue
                    await sink.upsert_entity(
                        create_repository_key(repository, self.source),
                        build_repository_entity(repository, self.source, names),
                    )

            get_metrics().record_crawl_errors(
                self.source.scm_provider, len(crawler.stats.repositories_skipped)
            )

        return len(seen_keys)

    @staticmethod
    async def _upsert_with_relations(sink: CatalogSink, key: str, entity: dict) -> None:
        await sink.upsert_entity(key, entity)
        entity_ref = f"component:default/{entity['metadata']['name']}"
        spec = entity["spec"]
        if "subcomponentOf" in spec:
            await sink.upsert_relation(Relation(entity_ref, "partOf", spec["subcomponentOf"]))
        for target in spec.get("dependsOn", []):
            await sink.upsert_relation(Relation(entity_ref, "dependsOn", target))


class HubCollectionSyncSource(SyncSource):
    """Syncs the collections published in one automation hub repository."""

    source_type = "hub"

    def __init__(
        self,
        repository_name: str,
        base_url: str,
        token: str,
        store: SyncStateStore,
        schedule: ScheduleConfig,
        sink: CatalogSink | None = None,
        env: str = "development",
        check_ssl: bool = True,
    ):
        self.repository_name = repository_name
        self.base_url = base_url
        self._token = token
        self._check_ssl = check_ssl
        self._env = env
        super().__init__(store, schedule, sink=sink)

    @property
    def source_id(self) -> str:
        return f"{sanitize_name(self._env)}:pah:{sanitize_name(self.repository_name)}"

    @property
    def provider_name(self) -> str:
        return f"Automation Hub ({self.repository_name})"

    def _create_client(self) -> HubClient:
        return HubClient(self.base_url, self._token, check_ssl=self._check_ssl)

    async def _sync(self, sink: CatalogSink) -> int:
        async with self._create_client() as client:
            collections = await client.list_collections(self.repository_name)

        for collection in collections:
            entity = build_hub_collection_entity(collection, self.repository_name, self.base_url)
            key = (
                f"pah:{self.repository_name}:{collection['namespace']}:"
                f"{collection['name']}@{collection.get('version')}"
            )
            await sink.upsert_entity(key, entity)
            entity_ref = f"component:default/{entity['metadata']['name']}"
            for target in entity["spec"].get("dependsOn", []):
                await sink.upsert_relation(Relation(entity_ref, "dependsOn", target))

        return len(collections)
