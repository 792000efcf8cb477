"""Shared fixtures: an in-memory site served by a fake fetcher."""
from __future__ import annotations

from typing import Dict, List, Optional, Union

import pytest

from sitewatch.errors import FetchFailed
from sitewatch.fetcher import FetchedPage
from sitewatch.fingerprints import FingerprintStore, SnapshotDirectory


class FakeFetcher:
    """
    Serves canned bodies by URL. Values may be HTML strings, raw bytes or
    FetchFailed. redirects maps a requested URL to the URL that serves it.
    """

    def __init__(
        self,
        pages: Dict[str, Union[str, bytes, FetchFailed]],
        redirects: Optional[Dict[str, str]] = None,
    ) -> None:
        self.pages = pages
        self.redirects = redirects or {}
        self.requested: List[str] = []
        self.closed = False

    def fetch(self, url: str) -> FetchedPage:
        self.requested.append(url)
        final_url = self.redirects.get(url, url)
        body = self.pages.get(final_url)
        if body is None:
            raise FetchFailed(url, "HTTP 404", status_code=404)
        if isinstance(body, FetchFailed):
            raise body
        if isinstance(body, bytes):
            content, text = body, body.decode("utf-8", errors="replace")
        else:
            content, text = body.encode("utf-8"), body
        return FetchedPage(
            url=final_url,
            status_code=200,
            text=text,
            content=content,
            content_type="text/html; charset=utf-8",
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def snapshot_dir(tmp_path):
    return tmp_path / "snapshots"


@pytest.fixture
def store(snapshot_dir):
    return FingerprintStore(SnapshotDirectory(snapshot_dir))
