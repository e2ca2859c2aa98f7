"""Resolves (provider, organization, host) into a configured SCM client."""

import logging

from galaxy_sync.config.sources import DEFAULT_HOSTS, IntegrationsConfig, ScmIntegration
from galaxy_sync.errors import (
    NoIntegrationConfiguredError,
    NoTokenConfiguredError,
    UnsupportedProviderError,
)
from galaxy_sync.scm.base import ScmClient, ScmClientConfig
from galaxy_sync.scm.github import GithubClient
from galaxy_sync.scm.gitlab import GitlabClient
from galaxy_sync.scm.http_client import RetryConfig

logger = logging.getLogger(__name__)

_CLIENTS: dict[str, tuple[str, type[ScmClient]]] = {
    "github": ("GitHub", GithubClient),
    "gitlab": ("GitLab", GitlabClient),
}


class ScmClientFactory:
    """
    Builds SCM clients from the configured integrations.

    Returns a new client on every call; clients are not cached.
    """

    def __init__(
        self,
        integrations: IntegrationsConfig,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
    ):
        self._integrations = integrations
        self._retry_config = retry_config
        self._timeout = timeout

    def _find_integration(self, scm_provider: str, host: str) -> ScmIntegration | None:
        for integration in getattr(self._integrations, scm_provider):
            if integration.host.lower() == host.lower():
                return integration
        return None

    def create_client(
        self,
        scm_provider: str,
        organization: str,
        host: str | None = None,
    ) -> ScmClient:
        """
        Create a client for an organization on a provider host.

        Raises:
            UnsupportedProviderError: Provider is not github or gitlab.
            NoIntegrationConfiguredError: No integration for the host.
            NoTokenConfiguredError: The integration has no token.
        """
        if scm_provider not in _CLIENTS:
            raise UnsupportedProviderError(scm_provider)

        label, client_cls = _CLIENTS[scm_provider]
        host = host or DEFAULT_HOSTS[scm_provider]

        integration = self._find_integration(scm_provider, host)
        if integration is None:
            raise NoIntegrationConfiguredError(label, host)
        if not integration.token:
            raise NoTokenConfiguredError(label, host)

        logger.debug(f"Creating {label} client for {organization} on {host}")
        return client_cls(
            ScmClientConfig(
                scm_provider=scm_provider,
                host=host,
                organization=organization,
                token=integration.token,
                api_base_url=integration.api_base_url,
            ),
            retry_config=self._retry_config,
            timeout=self._timeout,
        )
