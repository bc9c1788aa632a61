"""Shared URL utilities for normalization and model validation."""

from typing import Optional
from urllib.parse import urlparse

_HTTP_PREFIXES = ("http://", "https://")


def is_http_url(value: Optional[str]) -> bool:
    """True if value is an absolute http(s) URL with a host."""
    if not value or not isinstance(value, str):
        return False
    if any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def repair_url(value: Optional[str]) -> Optional[str]:
    """
    Repair a loosely-written link. Returns None when it cannot be made into an http(s) URL.
    - Already http(s)-prefixed: kept as is
    - Bare domain ("reef.org", "www.x.com/p"): https:// is prepended
    - Anything else (blank, "#", prose, other schemes): absent
    Idempotent: repair_url(repair_url(x)) == repair_url(x).
    """
    if not value or not isinstance(value, str):
        return None
    url = value.strip()
    if not url or url == "#":
        return None
    if not url.lower().startswith(_HTTP_PREFIXES):
        if "." not in url or "://" in url or any(ch.isspace() for ch in url):
            return None
        url = "https://" + url
    return url if is_http_url(url) else None
