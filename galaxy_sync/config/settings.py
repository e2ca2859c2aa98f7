"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the galaxy-sync process.

    All settings can be overridden via environment variables. Source and
    SCM integration definitions live in the YAML file at ``sources_file``
    (see galaxy_sync.config.sources).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # Source configuration file (providers, orgs, integrations)
    sources_file: str = "galaxy-sync.yaml"

    # Crawler
    crawler_concurrency: int = Field(default=5, ge=1, le=50)
    repository_batch_size: int = Field(default=20, ge=1, le=500)

    # HTTP retry configuration
    max_http_retries: int = Field(default=3, ge=0, le=10)
    max_backoff_seconds: float = Field(default=60.0, ge=1.0, le=300.0)
    http_timeout_seconds: float = Field(default=30.0, ge=1.0)

    # Automation platform (subscription check and hub collections)
    aap_base_url: str | None = None
    aap_token: str | None = None
    aap_check_ssl: bool = True
    subscription_check_interval_seconds: int = Field(default=86400, ge=60)

    # Client polling
    fast_poll_interval_seconds: float = Field(default=3.0, gt=0)
    slow_poll_interval_seconds: float = Field(default=15.0, gt=0)
    tracking_timeout_seconds: float = Field(default=1800.0, gt=0)

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8001
    api_keys: str | None = None  # Comma-separated; unset means open access
    cors_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = False
    scheduler_enabled: bool = True

    # Observability
    metrics_port: int = 8000

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def aap_configured(self) -> bool:
        """Check if an automation platform endpoint is configured."""
        return self.aap_base_url is not None and self.aap_token is not None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
