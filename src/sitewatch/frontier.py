"""
Per-run work queue: FIFO order plus dedup of pending and visited URLs.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, FrozenSet, Optional, Set


class Frontier:
    """
    Breadth-first frontier for a single crawl run.

    A URL is marked visited when it is popped, not when it is pushed. Pending
    URLs are tracked separately so repeated links to a page that has not been
    fetched yet do not grow the queue.
    """

    def __init__(self, seed: Optional[str] = None) -> None:
        self._pending: Deque[str] = deque()
        self._queued: Set[str] = set()
        self._visited: Set[str] = set()
        if seed is not None:
            self.push(seed)

    def push(self, url: str) -> bool:
        """Queue a normalized URL. Returns False if it was already pending or visited."""
        if url in self._visited or url in self._queued:
            return False
        self._pending.append(url)
        self._queued.add(url)
        return True

    def pop(self) -> Optional[str]:
        """Take the oldest pending URL and mark it visited. None when exhausted."""
        if not self._pending:
            return None
        url = self._pending.popleft()
        self._queued.discard(url)
        self._visited.add(url)
        return url

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def is_pending(self, url: str) -> bool:
        return url in self._queued

    @property
    def visited(self) -> FrozenSet[str]:
        return frozenset(self._visited)

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)
