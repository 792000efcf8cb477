"""
Core crawl loop: walk the site breadth-first and fingerprint every page.
"""
from __future__ import annotations

import logging
import sys
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

from sitewatch.config import CrawlConfig
from sitewatch.errors import FetchFailed, InvalidUrl
from sitewatch.fetcher import PageFetcher, extract_links
from sitewatch.fingerprints import FingerprintStore, PageStatus, SnapshotDirectory
from sitewatch.frontier import Frontier
from sitewatch.urls import in_scope, normalize_url

logger = logging.getLogger(__name__)

STATUS_MARKERS: Dict[PageStatus, str] = {
    PageStatus.NEW: "+",
    PageStatus.CHANGED: "!",
    PageStatus.UNCHANGED: "=",
    PageStatus.FETCH_FAILED: "✗",
}


@dataclass(slots=True)
class PageResult:
    """Outcome of checking a single page."""
    url: str
    status: PageStatus
    checked_at: Optional[str] = None
    http_status: Optional[int] = None
    fingerprint: Optional[str] = None
    previous_fingerprint: Optional[str] = None
    error: Optional[str] = None
    linked_from: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    status_counts: Dict[PageStatus, int] = field(default_factory=lambda: defaultdict(int))
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_page(self, status: PageStatus) -> None:
        self.pages_crawled += 1
        self.status_counts[status] += 1

    def record_error(self, status_code: Optional[int]) -> None:
        """Record a fetch failure by status code category."""
        if status_code is None:
            self.error_counts["connection_error"] += 1
        else:
            self.error_counts[str(status_code)] += 1

    @property
    def changes_detected(self) -> bool:
        return any(self.status_counts.get(s, 0) for s in PageStatus if s.is_change)


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def print_progress(scanned: int, visited: int, queue_size: int) -> None:
    """Print real-time progress to stderr."""
    # Clear line and print progress
    progress = f"\r\033[K[{scanned}] Visited: {visited} | Queue: {queue_size}"
    sys.stderr.write(progress)
    sys.stderr.flush()


def print_scan_line(result: PageResult, new_links: int) -> None:
    """Print single scan result line."""
    marker = STATUS_MARKERS[result.status]
    label = result.status.name
    suffix = f" ({result.error})" if result.error else f" (+{new_links} links)"
    sys.stderr.write(f"\n  {marker} {label:<12} {result.url}{suffix}")
    sys.stderr.flush()


def crawl(
    config: CrawlConfig,
    *,
    fetcher: Optional[PageFetcher] = None,
    store: Optional[FingerprintStore] = None,
    verbose: bool = False,
) -> Tuple[List[PageResult], CrawlStats]:
    """
    Crawl every in-scope page reachable from the seed and check it for changes.

    Args:
        config: Run parameters; the seed URL also defines the crawl scope.
        fetcher: Page fetcher; a PageFetcher on a fresh session by default.
        store: Fingerprint store; one backed by config.snapshot_dir by default.
        verbose: Whether to print progress and per-page status to stderr.

    Returns:
        Tuple of (results sorted by URL, crawl statistics).

    Raises:
        InvalidUrl: The seed URL is not an absolute http(s) URL.
        StoreIOError: A fingerprint could not be read or written. The run is
            aborted since later comparisons would be unreliable.
    """
    seed = normalize_url(config.seed_url)

    owns_fetcher = fetcher is None
    if fetcher is None:
        fetcher = PageFetcher(timeout_s=config.fetch_timeout, user_agent=config.user_agent)
    if store is None:
        store = FingerprintStore(SnapshotDirectory(config.snapshot_dir))

    # Crawl state
    frontier = Frontier(seed)
    results: Dict[str, PageResult] = {}
    inlinks: Dict[str, Set[str]] = defaultdict(set)
    stats = CrawlStats()

    if verbose:
        sys.stderr.write(f"Crawling: {seed}\n")
        sys.stderr.write(f"Snapshots: {config.snapshot_dir}\n")

    try:
        while frontier:
            if config.max_pages is not None and stats.pages_crawled >= config.max_pages:
                logger.warning("Stopping at max_pages=%d with %d URLs pending", config.max_pages, len(frontier))
                break

            url = frontier.pop()
            if verbose:
                print_progress(stats.pages_crawled, frontier.visited_count, len(frontier))

            try:
                page = fetcher.fetch(url)
            except FetchFailed as e:
                logger.warning("%s", e)
                result = PageResult(
                    url=url,
                    status=PageStatus.FETCH_FAILED,
                    checked_at=utc_now_iso(),
                    http_status=e.status_code,
                    error=e.reason,
                )
                results[url] = result
                stats.record_page(result.status)
                stats.record_error(e.status_code)
                if verbose:
                    print_scan_line(result, 0)
                continue

            fingerprint = store.check(url, page.content)
            result = PageResult(
                url=url,
                status=fingerprint.status,
                checked_at=utc_now_iso(),
                http_status=page.status_code,
                fingerprint=fingerprint.digest,
                previous_fingerprint=fingerprint.previous,
            )
            results[url] = result
            stats.record_page(result.status)

            # Discover and queue new links
            new_links_count = 0
            if page.is_html:
                for href in extract_links(page.text):
                    try:
                        target = normalize_url(href, base=page.url)
                    except InvalidUrl as e:
                        logger.debug("Skipping link on %s: %s", url, e)
                        continue
                    if not in_scope(target, seed):
                        continue

                    inlinks[target].add(url)
                    if frontier.push(target):
                        new_links_count += 1

            if verbose:
                print_scan_line(result, new_links_count)
    finally:
        if owns_fetcher:
            fetcher.close()
        if verbose:
            sys.stderr.write("\n\n")

    # Finalize backlinks
    for url, page_result in results.items():
        page_result.linked_from = sorted(inlinks.get(url, set()))

    # Return sorted results
    return [results[u] for u in sorted(results.keys())], stats
