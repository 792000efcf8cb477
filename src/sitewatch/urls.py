"""
URL normalization, scope checks and snapshot key encoding.
"""
from __future__ import annotations

import hashlib
from typing import Optional, Tuple
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from sitewatch.errors import InvalidUrl

ALLOWED_SCHEMES: frozenset[str] = frozenset(("http", "https"))

# Characters encodeURIComponent leaves alone, keeps keys readable by older snapshots
KEY_SAFE_CHARS = "!~*'()"
KEY_SUFFIX = ".hash"
# Longer encodings are truncated and suffixed with a digest (see to_storage_key)
MAX_ENCODED_KEY = 150


def normalize_url(url: str, base: Optional[str] = None) -> str:
    """
    Normalize URL for deduplication and snapshot lookups.

    - Joins relative URLs against base (the page the link was found on)
    - Drops fragments (#...)
    - Drops trailing slashes from the path
    - Keeps scheme, host, querystring and path casing as given

    Raises InvalidUrl for anything that is not an absolute http(s) URL.
    """
    if url is None or not url.strip():
        raise InvalidUrl(str(url), "empty URL")

    candidate = url.strip()
    try:
        joined = urljoin(base, candidate) if base else candidate
        parsed = urlsplit(joined)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidUrl(candidate, str(e)) from e

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidUrl(candidate, f"unsupported scheme {parsed.scheme!r}")
    if not parsed.hostname:
        raise InvalidUrl(candidate, "missing host")

    return urlunsplit((
        parsed.scheme,
        parsed.netloc,
        parsed.path.rstrip("/"),
        parsed.query,
        "",  # No fragment
    ))


def to_storage_key(url: str) -> str:
    """
    Encode a normalized URL as a filesystem-safe snapshot key.

    Short URLs are percent-encoded in full. Encodings longer than
    MAX_ENCODED_KEY are cut and tagged with the SHA-256 of the whole URL, so
    every key stays under the usual 255-byte file name limit. Hashed keys are
    always longer than full ones, so the two forms never collide.
    """
    encoded = quote(url, safe=KEY_SAFE_CHARS)
    if len(encoded) > MAX_ENCODED_KEY:
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
        encoded = f"{encoded[:MAX_ENCODED_KEY]}-{digest}"
    return encoded + KEY_SUFFIX


def origin_of(url: str) -> Tuple[str, str]:
    """Return (scheme, netloc) of a URL."""
    parsed = urlsplit(url)
    return parsed.scheme, parsed.netloc


def is_local(url: str, start_origin: Tuple[str, str]) -> bool:
    """Check if URL has same scheme and netloc as start URL."""
    return origin_of(url) == start_origin


def matches_path_prefix(url: str, path_prefix: Optional[str]) -> bool:
    """
    Check if URL path is the prefix itself or lies below it.

    The test respects segment boundaries: prefix "/a" matches "/a" and "/a/b"
    but not "/about".
    """
    if not path_prefix:
        return True
    path = urlsplit(url).path
    prefix = path_prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def in_scope(url: str, seed: str) -> bool:
    """Check if a normalized URL belongs to the site rooted at the normalized seed."""
    return is_local(url, origin_of(seed)) and matches_path_prefix(url, urlsplit(seed).path)
