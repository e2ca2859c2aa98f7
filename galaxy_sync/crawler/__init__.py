"""Galaxy file discovery across SCM repositories."""

from galaxy_sync.crawler.crawler import SKIP_DIRECTORIES, GalaxyCrawler, glob_to_regex
from galaxy_sync.crawler.schemas import CrawlStats, DiscoveredGalaxyFile, DiscoveryOptions

__all__ = [
    "CrawlStats",
    "DiscoveredGalaxyFile",
    "DiscoveryOptions",
    "GalaxyCrawler",
    "SKIP_DIRECTORIES",
    "glob_to_regex",
]
