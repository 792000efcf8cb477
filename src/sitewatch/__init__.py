"""
Change-detection crawler: walks a site breadth-first from a seed URL,
fingerprints every page and reports what changed since the previous run.
"""
from sitewatch.config import CrawlConfig
from sitewatch.core import crawl, CrawlStats, PageResult
from sitewatch.errors import FetchFailed, InvalidUrl, SiteWatchError, StoreIOError
from sitewatch.fingerprints import FingerprintStore, PageStatus, SnapshotDirectory
from sitewatch.frontier import Frontier
from sitewatch.urls import normalize_url, to_storage_key

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "CrawlConfig",
    "CrawlStats",
    "PageResult",
    "PageStatus",
    "Frontier",
    "FingerprintStore",
    "SnapshotDirectory",
    "normalize_url",
    "to_storage_key",
    "SiteWatchError",
    "InvalidUrl",
    "FetchFailed",
    "StoreIOError",
]
