"""
Sync status and sync trigger endpoints.

Trigger endpoints start syncs in the background and answer immediately;
the HTTP status summarizes the per-source results (202 all started,
200 all already running, 207 mixed, 400 invalid, 500 all failed).
"""

from dataclasses import asdict

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from galaxy_sync.api.auth import verify_api_key
from galaxy_sync.api.dependencies import get_scheduler, get_state_store
from galaxy_sync.api.models import (
    ContentStatus,
    ErrorResponse,
    HubSyncRequest,
    ProviderStatus,
    ScmSyncRequest,
    SyncResultModel,
    SyncStatusResponse,
    SyncSummary,
    SyncTriggerResponse,
)
from galaxy_sync.sync.filters import SyncFilter
from galaxy_sync.sync.scheduler import SyncScheduler
from galaxy_sync.sync.schemas import SyncStatus, TriggerOutcome
from galaxy_sync.sync.sources import GitContentsSyncSource, HubCollectionSyncSource
from galaxy_sync.sync.state_store import SyncStateStore

logger = structlog.get_logger(__name__)
router = APIRouter()


def _provider_status(
    source: GitContentsSyncSource | HubCollectionSyncSource,
    state: SyncStatus | None,
) -> ProviderStatus:
    state = state or SyncStatus(source_id=source.source_id)
    status = ProviderStatus(
        source_id=source.source_id,
        provider_name=source.provider_name,
        enabled=source.enabled,
        sync_in_progress=state.sync_in_progress,
        last_sync_time=state.last_sync_time,
        last_failed_sync_time=state.last_failed_sync_time,
        last_sync_status=state.last_sync_status,
        collections_found=state.collections_found,
        collections_delta=state.collections_delta,
    )
    if isinstance(source, GitContentsSyncSource):
        status.scm_provider = source.source.scm_provider
        status.host_name = source.source.host
        status.organization = source.source.organization
    else:
        status.repository = source.repository_name
    return status


def _trigger_response(outcome: TriggerOutcome) -> JSONResponse:
    body = SyncTriggerResponse(
        summary=SyncSummary(**outcome.summary),
        results=[SyncResultModel(**asdict(result)) for result in outcome.results],
    )
    return JSONResponse(
        status_code=outcome.status_code,
        content=body.model_dump(by_alias=True, exclude_none=True, mode="json"),
    )


@router.get(
    "/sync/status",
    response_model=SyncStatusResponse,
    response_model_by_alias=True,
    responses={401: {"model": ErrorResponse}},
    summary="Per-source sync status",
)
async def get_sync_status(
    ansible_contents: bool | None = Query(default=None, description="Include content sources"),
    api_key: str = Depends(verify_api_key),
    scheduler: SyncScheduler = Depends(get_scheduler),
    store: SyncStateStore = Depends(get_state_store),
) -> SyncStatusResponse:
    """
    Sync state for every configured source.

    The ``content`` block is included when ``ansible_contents=true`` or the
    parameter is omitted.
    """
    if ansible_contents is False:
        return SyncStatusResponse()

    providers = [
        _provider_status(source, store.get(source.source_id))
        for source in [*scheduler.scm_sources, *scheduler.hub_sources]
    ]
    return SyncStatusResponse(
        content=ContentStatus(
            sync_in_progress=any(p.sync_in_progress for p in providers),
            providers=providers,
        )
    )


@router.post(
    "/sync/from-scm/content",
    response_model=SyncTriggerResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Start collection discovery for SCM sources",
)
async def sync_from_scm(
    request: ScmSyncRequest | None = None,
    api_key: str = Depends(verify_api_key),
    scheduler: SyncScheduler = Depends(get_scheduler),
) -> JSONResponse:
    """Start syncs for the sources matching ``filters`` (all sources when empty)."""
    filters = [
        SyncFilter(scm_provider=f.scm_provider, host_name=f.host_name, organization=f.organization)
        for f in (request.filters if request else [])
    ]
    outcome = await scheduler.trigger_scm(filters)
    logger.info("SCM sync triggered", filters=len(filters), **outcome.summary)
    return _trigger_response(outcome)


@router.post(
    "/sync/from-aap/content",
    response_model=SyncTriggerResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Start collection sync for automation hub repositories",
)
async def sync_from_hub(
    request: HubSyncRequest | None = None,
    api_key: str = Depends(verify_api_key),
    scheduler: SyncScheduler = Depends(get_scheduler),
) -> JSONResponse:
    names = [f.repository_name for f in (request.filters if request else [])]
    outcome = await scheduler.trigger_hub(names)
    logger.info("Hub sync triggered", repositories=names, **outcome.summary)
    return _trigger_response(outcome)
