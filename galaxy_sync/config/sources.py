"""
Typed source and integration configuration.

The YAML file is validated once at load time into ``SyncConfig``; the
rest of the system only ever sees immutable ``SourceConfig`` values, one
per (environment, provider host, organization). A ``SourceConfig`` is a
tagged union over GitHub and GitLab variants discriminated on
``scm_provider``.

Example::

    environments:
      development:
        schedule: {frequency_seconds: 3600, timeout_seconds: 900}
        providers:
          github:
            - name: github-public
              orgs:
                - name: ansible
                  branches: [main]
                  tags: ["v*"]
    integrations:
      github:
        - host: github.com
          token: ${GITHUB_TOKEN}
"""

import logging
import os
import re
from pathlib import Path
from typing import Annotated, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from galaxy_sync.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_HOSTS = {"github": "github.com", "gitlab": "gitlab.com"}

_ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
DEFAULT_CRAWL_DEPTH = 5


class ScheduleConfig(BaseModel):
    """How often a source runs and how long a run may take."""

    model_config = ConfigDict(frozen=True)

    frequency_seconds: int = Field(default=3600, ge=1)
    timeout_seconds: int = Field(default=900, ge=1)
    initial_delay_seconds: int = Field(default=0, ge=0)


class _BaseSourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    host_name: str = Field(..., description="Display label of the provider host entry")
    organization: str
    env: str = "development"
    enabled: bool = True
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    galaxy_file_paths: tuple[str, ...] = ()
    crawl_depth: int = Field(default=DEFAULT_CRAWL_DEPTH, ge=0)
    branches: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()


class GithubSourceConfig(_BaseSourceConfig):
    """A GitHub organization (or user) to crawl."""

    scm_provider: Literal["github"] = "github"


class GitlabSourceConfig(_BaseSourceConfig):
    """A GitLab group to crawl."""

    scm_provider: Literal["gitlab"] = "gitlab"


SourceConfig = Annotated[
    Union[GithubSourceConfig, GitlabSourceConfig],
    Field(discriminator="scm_provider"),
]
SourceConfigAdapter = TypeAdapter(SourceConfig)


class ScmIntegration(BaseModel):
    """Credentials for one SCM host."""

    model_config = ConfigDict(frozen=True)

    host: str
    token: str | None = None
    api_base_url: str | None = None


class IntegrationsConfig(BaseModel):
    github: list[ScmIntegration] = Field(default_factory=list)
    gitlab: list[ScmIntegration] = Field(default_factory=list)


class OrgEntry(BaseModel):
    name: str
    branches: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    galaxy_file_paths: list[str] = Field(default_factory=list)
    crawl_depth: int = Field(default=DEFAULT_CRAWL_DEPTH, ge=0)
    schedule: ScheduleConfig | None = None
    enabled: bool = True


class ProviderHostEntry(BaseModel):
    name: str
    host: str | None = None
    orgs: list[OrgEntry] = Field(default_factory=list)


class ProvidersEntry(BaseModel):
    github: list[ProviderHostEntry] = Field(default_factory=list)
    gitlab: list[ProviderHostEntry] = Field(default_factory=list)


class EnvironmentEntry(BaseModel):
    enabled: bool = True
    schedule: ScheduleConfig | None = None
    providers: ProvidersEntry = Field(default_factory=ProvidersEntry)


class HubConfig(BaseModel):
    """Automation hub repositories whose collections are synced."""

    repositories: list[str] = Field(default_factory=list)
    env: str = "development"
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)


class SyncConfig(BaseModel):
    """Root of the YAML configuration file."""

    environments: dict[str, EnvironmentEntry] = Field(default_factory=dict)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)
    hub: HubConfig | None = None

    def source_configs(self) -> list[GithubSourceConfig | GitlabSourceConfig]:
        """
        Flatten environments into one SourceConfig per organization.

        An organization without its own schedule inherits the environment
        schedule. Organizations with neither are skipped with an error log.
        """
        sources: list[GithubSourceConfig | GitlabSourceConfig] = []

        for env_name, env in self.environments.items():
            if not env.enabled:
                logger.info(f"Environment {env_name} disabled, skipping its sources")
                continue

            for provider in ("github", "gitlab"):
                for host_entry in getattr(env.providers, provider):
                    host = host_entry.host or DEFAULT_HOSTS[provider]
                    for org in host_entry.orgs:
                        schedule = org.schedule or env.schedule
                        if schedule is None:
                            logger.error(
                                f"No schedule configured for {provider} org {org.name} "
                                f"on {host} in environment {env_name}, skipping"
                            )
                            continue
                        sources.append(
                            SourceConfigAdapter.validate_python({
                                "scm_provider": provider,
                                "host": host,
                                "host_name": host_entry.name,
                                "organization": org.name,
                                "env": env_name,
                                "enabled": org.enabled,
                                "schedule": schedule,
                                "galaxy_file_paths": tuple(org.galaxy_file_paths),
                                "crawl_depth": org.crawl_depth,
                                "branches": tuple(org.branches),
                                "tags": tuple(org.tags),
                            })
                        )

        return sources


def expand_env_references(text: str) -> str:
    """Replace ``${VAR}`` with its environment value; unset variables become empty."""
    return _ENV_REFERENCE.sub(lambda m: os.environ.get(m.group(1), ""), text)


def load_sync_config(path: str | Path) -> SyncConfig:
    """
    Load and validate the sources file.

    ``${VAR}`` references are expanded from the environment before parsing
    so tokens can stay out of the file. An unset variable leaves the value
    empty, so a missing token is reported when the client is created.

    Raises:
        ConfigurationError: If the file is missing, unparseable, or invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Sources file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(expand_env_references(f.read())) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    try:
        config = SyncConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    logger.info(f"Loaded sync config from: {config_path}")
    return config
