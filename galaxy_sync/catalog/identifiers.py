"""
Stable identifiers for discovered collections, repositories and sources.

Keys (``create_collection_key``, ``create_repository_key``) identify a
record across re-crawls and keep the original casing of their path
segments. Entity names are derived by ``sanitize_name`` and are safe to
use as catalog object names (lowercase, hyphenated, at most 63 chars).
"""

import re
from dataclasses import dataclass

from galaxy_sync.config.sources import DEFAULT_HOSTS, GithubSourceConfig, GitlabSourceConfig
from galaxy_sync.galaxy.schema import GalaxyMetadata
from galaxy_sync.scm.schemas import RepositoryInfo

MAX_NAME_LENGTH = 63

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

Source = GithubSourceConfig | GitlabSourceConfig


@dataclass(frozen=True)
class CollectionIdentifier:
    scm_provider: str
    host: str
    host_name: str
    organization: str
    namespace: str
    name: str
    version: str


def sanitize_name(value: str) -> str:
    """Lowercase, hyphenate non-alphanumeric runs, cap at 63 chars, trim edge hyphens."""
    return _NON_ALNUM.sub("-", value.lower())[:MAX_NAME_LENGTH].strip("-")


def sanitize_host_name(host: str) -> str:
    return sanitize_name(host)


def get_default_host(scm_provider: str) -> str:
    return DEFAULT_HOSTS.get(scm_provider, DEFAULT_HOSTS["github"])


def _source_host(source: Source) -> str:
    return source.host or get_default_host(source.scm_provider)


def create_collection_identifier(
    metadata: GalaxyMetadata,
    source: Source,
) -> CollectionIdentifier:
    """Combine validated collection metadata with the source's location."""
    host = _source_host(source)
    return CollectionIdentifier(
        scm_provider=source.scm_provider,
        host=host,
        host_name=sanitize_host_name(host),
        organization=source.organization,
        namespace=metadata.namespace,
        name=metadata.name,
        version=metadata.version,
    )


def create_collection_key(identifier: CollectionIdentifier) -> str:
    """
    ``provider:host:namespace:name@version`` with the host as configured.

    Namespace and name may contain dots but never colons, so separating
    them with a colon keeps ``a.b`` + ``c`` apart from ``a`` + ``b.c``.
    """
    return (
        f"{identifier.scm_provider}:{identifier.host}:"
        f"{identifier.namespace}:{identifier.name}@{identifier.version}"
    )


def create_repository_key(repository: RepositoryInfo, source: Source) -> str:
    return f"{source.scm_provider}:{sanitize_host_name(_source_host(source))}:{repository.full_path}"


def generate_collection_entity_name(metadata: GalaxyMetadata, source: Source) -> str:
    return sanitize_name(
        f"{metadata.namespace}-{metadata.name}-{metadata.version}-"
        f"{source.scm_provider}-{_source_host(source)}"
    )


def generate_repository_entity_name(repository: RepositoryInfo, source: Source) -> str:
    return sanitize_name(f"{repository.full_path}-{source.scm_provider}-{_source_host(source)}")


def generate_source_id(source: Source) -> str:
    """
    Source id in the form ``env:provider:sanitizedHost:organization``.

    Example: ``development:github:github-com:ansible``.
    """
    return ":".join([
        sanitize_name(source.env),
        source.scm_provider,
        sanitize_host_name(_source_host(source)),
        sanitize_name(source.organization),
    ])
