"""
Dependency injection for FastAPI endpoints.

The scheduler, state store, catalog sink, SCM client factory and
subscription service are created once per process by
``init_dependencies`` (called from the app lifespan, or lazily on first
request) and handed to routes through ``Depends``.
"""

import structlog

from galaxy_sync.catalog.sink import CatalogSink, InMemoryCatalogSink
from galaxy_sync.config.settings import Settings, get_settings
from galaxy_sync.config.sources import SyncConfig, load_sync_config
from galaxy_sync.scm.factory import ScmClientFactory
from galaxy_sync.subscription.service import SubscriptionService
from galaxy_sync.sync.scheduler import SyncScheduler, build_client_factory, build_scheduler
from galaxy_sync.sync.state_store import SyncStateStore

logger = structlog.get_logger(__name__)

# Global service instances
_sink: CatalogSink | None = None
_state_store: SyncStateStore | None = None
_scheduler: SyncScheduler | None = None
_client_factory: ScmClientFactory | None = None
_subscription_service: SubscriptionService | None = None


def init_dependencies(
    config: SyncConfig | None = None,
    settings: Settings | None = None,
    sink: CatalogSink | None = None,
) -> SyncScheduler:
    """
    Build the process-wide services.

    Loads the sources file named by ``settings.sources_file`` unless a
    config is given. Safe to call more than once; later calls are no-ops.
    """
    global _sink, _state_store, _scheduler, _client_factory, _subscription_service

    if _scheduler is not None:
        return _scheduler

    settings = settings or get_settings()
    config = config or load_sync_config(settings.sources_file)

    _sink = sink or InMemoryCatalogSink()
    _state_store = SyncStateStore()
    _client_factory = build_client_factory(config, settings)
    _scheduler = build_scheduler(
        config, settings, _sink, store=_state_store, client_factory=_client_factory
    )

    if settings.aap_configured:
        _subscription_service = SubscriptionService(
            settings.aap_base_url,
            settings.aap_token,
            check_ssl=settings.aap_check_ssl,
            check_interval_seconds=settings.subscription_check_interval_seconds,
        )

    logger.info(
        "Dependencies initialized",
        scm_sources=len(_scheduler.scm_sources),
        hub_sources=len(_scheduler.hub_sources),
        subscription_check=_subscription_service is not None,
    )
    return _scheduler


def get_scheduler() -> SyncScheduler:
    return init_dependencies()


def get_state_store() -> SyncStateStore:
    init_dependencies()
    return _state_store


def get_sink() -> CatalogSink:
    init_dependencies()
    return _sink


def get_client_factory() -> ScmClientFactory:
    init_dependencies()
    return _client_factory


def get_subscription_service() -> SubscriptionService | None:
    """The subscription service, or None when no automation platform is configured."""
    init_dependencies()
    return _subscription_service


async def cleanup_dependencies() -> None:
    """Stop background work and drop global dependencies on shutdown."""
    global _sink, _state_store, _scheduler, _client_factory, _subscription_service

    if _scheduler is not None:
        await _scheduler.stop()
    if _subscription_service is not None:
        await _subscription_service.stop()

    _sink = None
    _state_store = None
    _scheduler = None
    _client_factory = None
    _subscription_service = None
