"""
Exception hierarchy for galaxy-sync.

Errors are contained at the narrowest scope that can absorb them:
a bad galaxy.yml skips one file, a failing repository skips one
repository, and only configuration errors fail a whole source run.
"""


class GalaxySyncError(Exception):
    """Base exception for all galaxy-sync errors."""


class ConfigurationError(GalaxySyncError):
    """Raised when source or integration configuration is unusable."""


class UnsupportedProviderError(ConfigurationError):
    """Raised for an SCM provider other than github or gitlab."""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported SCM provider: {provider}")
        self.provider = provider


class NoIntegrationConfiguredError(ConfigurationError):
    """Raised when no integration entry matches the requested host."""

    def __init__(self, provider_label: str, host: str):
        super().__init__(f"No {provider_label} integration configured for host: {host}")
        self.host = host


class NoTokenConfiguredError(ConfigurationError):
    """Raised when the matching integration entry carries no token."""

    def __init__(self, provider_label: str, host: str):
        super().__init__(f"No token configured for {provider_label} host: {host}")
        self.host = host


class TransientFetchError(GalaxySyncError):
    """Raised when an SCM request fails after retries."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GalaxyParseError(GalaxySyncError):
    """Raised when galaxy.yml text is not parseable YAML."""


class GalaxyValidationError(GalaxySyncError):
    """Raised when parsed galaxy.yml content fails validation."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors
