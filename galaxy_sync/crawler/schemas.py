"""Crawler inputs, outputs and per-crawl statistics."""

from dataclasses import dataclass, field

from galaxy_sync.galaxy.schema import GalaxyMetadata
from galaxy_sync.scm.schemas import RefType, RepositoryInfo


@dataclass(frozen=True)
class DiscoveryOptions:
    """
    What to crawl in each repository.

    ``branches`` adds branches beyond the default branch (only those that
    exist). ``tags`` are glob patterns (``*`` and ``?``). ``galaxy_file_paths``
    restricts the walk to the listed start directories instead of the
    repository root.
    """

    branches: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    galaxy_file_paths: tuple[str, ...] = ()
    crawl_depth: int = 5


@dataclass(frozen=True)
class DiscoveredGalaxyFile:
    """A validated galaxy.yml found at a specific ref of a repository."""

    repository: RepositoryInfo
    ref: str
    ref_type: RefType
    path: str
    content: str
    metadata: GalaxyMetadata


@dataclass
class CrawlStats:
    repositories_scanned: int = 0
    repositories_skipped: list[str] = field(default_factory=list)
    refs_scanned: int = 0
    files_found: int = 0
    files_invalid: int = 0
