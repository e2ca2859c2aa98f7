"""
Galaxy file discovery across an organization's repositories.

For every repository the crawler picks the refs to inspect (default branch,
plus configured branches that exist and tags matching configured globs),
walks each ref's tree up to ``crawl_depth`` levels below each start path,
and yields every galaxy.yml that parses and validates.

Repositories are crawled concurrently, bounded by a semaphore. Discoveries
are handed through a queue and yielded as soon as they are found, so a
caller can upsert while the crawl is still running.
"""

import asyncio
import logging
import re
from collections.abc import AsyncIterator, Iterable

from galaxy_sync.crawler.schemas import CrawlStats, DiscoveredGalaxyFile, DiscoveryOptions
from galaxy_sync.errors import GalaxyParseError
from galaxy_sync.galaxy.schema import is_galaxy_file_name, parse_galaxy_file, validate_galaxy_content
from galaxy_sync.scm.base import ScmClient
from galaxy_sync.scm.schemas import RepositoryInfo, RepositoryRef

logger = logging.getLogger(__name__)

SKIP_DIRECTORIES = frozenset({
    "node_modules",
    ".git",
    ".github",
    ".gitlab",
    "__pycache__",
    ".tox",
    ".venv",
    "venv",
    ".cache",
    "dist",
    "build",
    "docs",
    "tests",
    "test",
})

_DONE = object()


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a tag glob (``*`` and ``?`` only) into an anchored regex."""
    escaped = re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(f"^{escaped}$")


def matches_any_pattern(name: str, patterns: Iterable[str]) -> bool:
    return any(glob_to_regex(p).match(name) for p in patterns)


class GalaxyCrawler:
    """
    Finds galaxy.yml files in the repositories visible to an SCM client.

    Usage:
        crawler = GalaxyCrawler(client, DiscoveryOptions(tags=("v*",)))
        async for galaxy_file in crawler.discover():
            ...
    """

    def __init__(
        self,
        client: ScmClient,
        options: DiscoveryOptions | None = None,
        concurrency: int = 5,
    ):
        self._client = client
        self._options = options or DiscoveryOptions()
        self._concurrency = max(1, concurrency)
        self.stats = CrawlStats()

    @property
    def _repo_label(self) -> str:
        return "projects" if self._client.scm_provider == "gitlab" else "repositories"

    async def discover(self) -> AsyncIterator[DiscoveredGalaxyFile]:
        """
        Crawl every repository of the client's organization.

        Failing to list the organization's repositories raises; failures
        inside a single repository only skip that repository.
        """
        repositories = await self._client.list_repositories()
        logger.info(
            f"Found {len(repositories)} {self._repo_label} in "
            f"{self._client.organization} on {self._client.host}"
        )
        async for galaxy_file in self.discover_in_repositories(repositories):
            yield galaxy_file

    async def discover_in_repositories(
        self,
        repositories: list[RepositoryInfo],
    ) -> AsyncIterator[DiscoveredGalaxyFile]:
        """Crawl the given repositories concurrently, yielding as files are found."""
        if not repositories:
            return

        queue: asyncio.Queue = asyncio.Queue()
        semaphore = asyncio.Semaphore(self._concurrency)

        async def worker(repository: RepositoryInfo) -> None:
            try:
                async with semaphore:
                    await self._crawl_repository(repository, queue)
            finally:
                queue.put_nowait(_DONE)

        tasks = [
            asyncio.create_task(worker(repo), name=f"crawl:{repo.full_path}")
            for repo in repositories
        ]

        try:
            remaining = len(tasks)
            while remaining:
                item = await queue.get()
                if item is _DONE:
                    remaining -= 1
                    continue
                yield item
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        self._log_summary()

    async def _crawl_repository(self, repository: RepositoryInfo, queue: asyncio.Queue) -> None:
        try:
            refs = await self.select_refs(repository)
            for ref in refs:
                self.stats.refs_scanned += 1
                for path in await self._find_galaxy_paths(repository, ref):
                    galaxy_file = await self._process_galaxy_file(repository, ref, path)
                    if galaxy_file is not None:
                        self.stats.files_found += 1
                        queue.put_nowait(galaxy_file)
            self.stats.repositories_scanned += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Error crawling {repository.full_path}, skipping: {e}")
            self.stats.repositories_skipped.append(repository.full_path)

    async def select_refs(self, repository: RepositoryInfo) -> list[RepositoryRef]:
        """
        Refs to crawl: the default branch always first, then configured
        branches that exist, then tags matching a configured pattern.
        """
        selected = [RepositoryRef(repository.default_branch, "branch")]
        if not self._options.branches and not self._options.tags:
            return selected

        seen = {repository.default_branch}
        available = await self._client.list_refs(repository)
        existing_branches = {r.name for r in available if r.ref_type == "branch"}

        for branch in self._options.branches:
            if branch in existing_branches and branch not in seen:
                selected.append(RepositoryRef(branch, "branch"))
                seen.add(branch)

        if self._options.tags:
            for ref in available:
                if ref.ref_type == "tag" and matches_any_pattern(ref.name, self._options.tags):
                    selected.append(ref)

        return selected

    async def _find_galaxy_paths(self, repository: RepositoryInfo, ref: RepositoryRef) -> list[str]:
        start_paths = self._options.galaxy_file_paths or ("",)
        found: list[str] = []
        for start in start_paths:
            start = start.strip("/")
            if is_galaxy_file_name(start.rsplit("/", 1)[-1]):
                # Direct path to a galaxy file, probed by reading it
                found.append(start)
                continue
            found.extend(
                await self.crawl_directory(repository, ref.name, start, self._options.crawl_depth)
            )
        return list(dict.fromkeys(found))

    async def crawl_directory(
        self,
        repository: RepositoryInfo,
        ref: str,
        path: str,
        depth: int,
    ) -> list[str]:
        """Galaxy file paths at or below ``path``, at most ``depth`` levels down."""
        if depth <= 0:
            return []

        entries = await self._client.list_directory(repository, ref, path)
        found = [e.path for e in entries if e.type == "file" and is_galaxy_file_name(e.name)]

        for entry in entries:
            if entry.type == "dir" and entry.name.lower() not in SKIP_DIRECTORIES:
                found.extend(await self.crawl_directory(repository, ref, entry.path, depth - 1))

        return found

    async def _process_galaxy_file(
        self,
        repository: RepositoryInfo,
        ref: RepositoryRef,
        path: str,
    ) -> DiscoveredGalaxyFile | None:
        content = await self._client.read_file(repository, ref.name, path)
        if content is None:
            return None

        try:
            data = parse_galaxy_file(content)
        except GalaxyParseError as e:
            logger.warning(f"Failed to parse {repository.full_path}@{ref.name}:{path}: {e}")
            self.stats.files_invalid += 1
            return None

        result = validate_galaxy_content(data)
        if not result.success:
            logger.debug(
                f"Invalid galaxy file {repository.full_path}@{ref.name}:{path}: "
                f"{', '.join(result.errors or [])}"
            )
            self.stats.files_invalid += 1
            return None

        return DiscoveredGalaxyFile(
            repository=repository,
            ref=ref.name,
            ref_type=ref.ref_type,
            path=path,
            content=content,
            metadata=result.data,
        )

    def _log_summary(self) -> None:
        logger.info(
            f"Crawl of {self._client.organization} complete: "
            f"{self.stats.repositories_scanned} {self._repo_label} scanned, "
            f"{self.stats.files_found} galaxy files found, "
            f"{self.stats.files_invalid} invalid"
        )
        if self.stats.repositories_skipped:
            logger.warning(
                f"Skipped {len(self.stats.repositories_skipped)} {self._repo_label} "
                f"due to errors: {', '.join(self.stats.repositories_skipped)}"
            )
