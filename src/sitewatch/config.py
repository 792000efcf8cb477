"""
Run parameters for a crawl.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Network timeout for a single page fetch (seconds)
DEFAULT_TIMEOUT = 10.0

# Directory holding one fingerprint file per page
DEFAULT_SNAPSHOT_DIR = "snapshots"

DEFAULT_USER_AGENT = "SiteWatch/1.0"


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Settings for one crawl run. The seed URL is both start point and scope."""
    seed_url: str
    fetch_timeout: float = DEFAULT_TIMEOUT
    snapshot_dir: str = DEFAULT_SNAPSHOT_DIR
    user_agent: str = DEFAULT_USER_AGENT
    max_pages: Optional[int] = None

    def __post_init__(self) -> None:
        if self.fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {self.fetch_timeout}")
        if self.max_pages is not None and self.max_pages <= 0:
            raise ValueError(f"max_pages must be positive, got {self.max_pages}")
