"""
HTTP fetching and link extraction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests
from bs4 import BeautifulSoup, SoupStrainer

from sitewatch.errors import FetchFailed

logger = logging.getLogger(__name__)

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


@dataclass(slots=True)
class FetchedPage:
    """
    Body and metadata of a successfully fetched page.

    url is where the body was served from after redirects; relative links
    resolve against it. content is the raw body used for fingerprinting.
    """
    url: str
    status_code: int
    text: str
    content: bytes
    content_type: str = ""

    @property
    def is_html(self) -> bool:
        # Servers that omit the header still get their links followed
        return not self.content_type or "html" in self.content_type


class PageFetcher:
    """Blocking page fetcher built on a shared requests session."""

    def __init__(
        self,
        timeout_s: float,
        user_agent: str,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(self, url: str) -> FetchedPage:
        """
        Fetch a page.

        Raises FetchFailed on connection errors, timeouts and any non-2xx
        final status.
        """
        try:
            resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=True)
        except requests.Timeout as e:
            raise FetchFailed(url, f"timed out after {self.timeout_s}s") from e
        except requests.RequestException as e:
            raise FetchFailed(url, str(e) or type(e).__name__) from e

        if not 200 <= resp.status_code < 300:
            raise FetchFailed(url, f"HTTP {resp.status_code}", status_code=resp.status_code)

        return FetchedPage(
            url=resp.url or url,
            status_code=resp.status_code,
            text=resp.text,
            content=resp.content,
            content_type=(resp.headers.get("content-type") or "").lower(),
        )

    def close(self) -> None:
        self.session.close()


def extract_links(html: str) -> List[str]:
    """Extract all href values from <a> tags using optimized parsing."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    return [a["href"] for a in soup.find_all("a") if a.get("href")]
