"""
Request and response models for the sync API.

JSON bodies use camelCase keys (``scmProvider``, ``syncInProgress``);
the trigger summary and the hub filter keep their snake_case names.
"""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases; accepts either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(..., description="Error message")
    error_type: str | None = Field(default=None, description="Error type")


# Sync status


class ProviderStatus(CamelModel):
    """Sync state of one source."""

    source_id: str
    provider_name: str
    enabled: bool = True
    scm_provider: str | None = None
    host_name: str | None = None
    organization: str | None = None
    repository: str | None = Field(default=None, description="Hub repository name")
    sync_in_progress: bool = False
    last_sync_time: dt.datetime | None = None
    last_failed_sync_time: dt.datetime | None = None
    last_sync_status: Literal["success", "failure"] | None = None
    collections_found: int = 0
    collections_delta: int = 0


class ContentStatus(CamelModel):
    sync_in_progress: bool
    providers: list[ProviderStatus]


class SyncStatusResponse(CamelModel):
    content: ContentStatus | None = None


# Sync triggers


class ScmSyncFilter(CamelModel):
    """Selects SCM sources; every field is optional and validated server-side."""

    scm_provider: str | None = None
    host_name: str | None = None
    organization: str | None = None


class ScmSyncRequest(BaseModel):
    filters: list[ScmSyncFilter] = Field(default_factory=list)


class HubSyncFilter(BaseModel):
    repository_name: str = Field(..., min_length=1)


class HubSyncRequest(BaseModel):
    filters: list[HubSyncFilter] = Field(default_factory=list)


class SyncErrorModel(BaseModel):
    code: str
    message: str


class SyncResultModel(CamelModel):
    status: Literal["sync_started", "already_syncing", "failed", "invalid"]
    scm_provider: str | None = None
    host_name: str | None = None
    organization: str | None = None
    repository_name: str | None = None
    provider_name: str | None = None
    source_id: str | None = None
    error: SyncErrorModel | None = None


class SyncSummary(BaseModel):
    total: int
    sync_started: int
    already_syncing: int
    failed: int
    invalid: int


class SyncTriggerResponse(BaseModel):
    summary: SyncSummary
    results: list[SyncResultModel]


# Subscription


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(..., alias="isValid")
    error_message: str | None = None
