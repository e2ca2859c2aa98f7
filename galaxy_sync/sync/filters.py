"""Selection of SCM sources by (provider, host, organization) filters."""

from dataclasses import dataclass

from galaxy_sync.catalog.identifiers import Source, sanitize_host_name

SUPPORTED_PROVIDERS = ("github", "gitlab")


@dataclass(frozen=True)
class SyncFilter:
    scm_provider: str | None = None
    host_name: str | None = None
    organization: str | None = None


def validate_sync_filter(sync_filter: SyncFilter) -> str | None:
    """
    Return an error message for an invalid filter, or None if it is valid.

    A filter with no fields set is valid and matches every source.
    """
    if not sync_filter.scm_provider:
        if sync_filter.host_name:
            return "hostName requires scmProvider to be specified"
        if sync_filter.organization:
            return "organization requires scmProvider to be specified"
        return None

    if sync_filter.scm_provider not in SUPPORTED_PROVIDERS:
        return f"Unsupported SCM provider: {sync_filter.scm_provider}"

    if sync_filter.organization and not sync_filter.host_name:
        return "organization requires hostName to be specified"

    return None


def source_matches_filter(source: Source, sync_filter: SyncFilter) -> bool:
    """
    Check a source against a filter.

    ``host_name`` matches either the raw host (``github.com``) or its
    sanitized form (``github-com``).
    """
    if sync_filter.scm_provider and source.scm_provider != sync_filter.scm_provider:
        return False
    if sync_filter.host_name:
        if sanitize_host_name(sync_filter.host_name) != sanitize_host_name(source.host):
            return False
    if sync_filter.organization and source.organization != sync_filter.organization:
        return False
    return True
