"""
Content fingerprints and the snapshot store that keeps them between runs.

Each page is reduced to a SHA-256 digest of its body. The digest is stored in
one small file per page inside a snapshot directory, keyed by the encoded URL
(see sitewatch.urls.to_storage_key). On every visit the new digest is compared
with the stored one and then written back, so the directory always holds the
latest observed state of the site. Older digests are not kept.
"""
from __future__ import annotations

import enum
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from sitewatch.errors import StoreIOError
from sitewatch.urls import to_storage_key

logger = logging.getLogger(__name__)


class PageStatus(str, enum.Enum):
    """Outcome of checking one page during a run."""
    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    FETCH_FAILED = "fetch_failed"

    @property
    def is_change(self) -> bool:
        return self in (PageStatus.NEW, PageStatus.CHANGED)


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """Result of comparing a page body against its stored fingerprint."""
    url: str
    key: str
    digest: str
    previous: Optional[str]
    status: PageStatus


def compute_hash(content: Union[str, bytes]) -> str:
    """Return the hex SHA-256 digest of a page body (text is UTF-8 encoded)."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def classify(old: Optional[str], new: str) -> PageStatus:
    """Compare a stored digest with a freshly computed one."""
    if old is None:
        return PageStatus.NEW
    if old == new:
        return PageStatus.UNCHANGED
    return PageStatus.CHANGED


class SnapshotDirectory:
    """Key/value byte store backed by one file per key."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / key

    def exists(self, key: str) -> bool:
        try:
            return self._path(key).is_file()
        except OSError as e:
            raise StoreIOError(key, str(e)) from e

    def read(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as e:
            raise StoreIOError(key, str(e)) from e

    def write(self, key: str, data: bytes) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self._path(key).write_bytes(data)
        except OSError as e:
            raise StoreIOError(key, str(e)) from e


class FingerprintStore:
    """Loads, compares and persists per-page fingerprints."""

    def __init__(self, backend: SnapshotDirectory) -> None:
        self.backend = backend

    def load(self, key: str) -> Optional[str]:
        """Return the digest recorded by a previous run, or None for an unseen page."""
        if not self.backend.exists(key):
            return None
        try:
            digest = self.backend.read(key).decode("ascii").strip()
        except UnicodeDecodeError as e:
            raise StoreIOError(key, f"corrupt fingerprint: {e}") from e
        return digest or None

    def save(self, key: str, digest: str) -> None:
        """Persist a digest, overwriting any previous value."""
        self.backend.write(key, digest.encode("ascii"))
        logger.debug("Saved fingerprint %s -> %s", key, digest)

    def check(self, url: str, content: Union[str, bytes]) -> Fingerprint:
        """
        Fingerprint a page body and record it.

        The new digest is saved on every call, whether or not it changed.
        """
        key = to_storage_key(url)
        digest = compute_hash(content)
        previous = self.load(key)
        status = classify(previous, digest)
        self.save(key, digest)
        return Fingerprint(url=url, key=key, digest=digest, previous=previous, status=status)
