"""
Exception types raised while crawling.
"""
from __future__ import annotations

from typing import Optional


class SiteWatchError(Exception):
    """Base class for all crawler errors."""


class InvalidUrl(SiteWatchError):
    """URL cannot be parsed or uses an unsupported scheme."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class FetchFailed(SiteWatchError):
    """A single page could not be fetched (network error, timeout, non-2xx)."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class StoreIOError(SiteWatchError):
    """Fingerprint snapshot could not be read or written. Aborts the run."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Snapshot store error for {key}: {reason}")
        self.key = key
        self.reason = reason
