"""Process settings and typed source configuration."""

from galaxy_sync.config.settings import Settings, get_settings
from galaxy_sync.config.sources import (
    GithubSourceConfig,
    GitlabSourceConfig,
    IntegrationsConfig,
    ScheduleConfig,
    ScmIntegration,
    SourceConfig,
    SyncConfig,
    load_sync_config,
)

__all__ = [
    "Settings",
    "get_settings",
    "GithubSourceConfig",
    "GitlabSourceConfig",
    "IntegrationsConfig",
    "ScheduleConfig",
    "ScmIntegration",
    "SourceConfig",
    "SyncConfig",
    "load_sync_config",
]
