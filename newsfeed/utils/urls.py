"""URL canonicalization helpers for article dedup."""

from __future__ import annotations

from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

TRACKING_PARAM_PREFIXES = ("utm_", "fbclid", "gclid", "mc_", "igshid")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Canonicalize a URL for dedup.

    - Lowercase scheme + hostname, drop default ports
    - Remove fragments
    - Strip tracking query parameters (by prefix)
    - Strip trailing slashes except for the root path
    - Sort remaining query params by key

    Raises ``ValueError`` when the input is not an absolute URL.
    """
    candidate = (url or "").strip()
    parts = urlsplit(candidate)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Invalid URL provided for normalization: {url}")

    scheme = parts.scheme.lower()
    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    netloc = host if port is None or _DEFAULT_PORTS.get(scheme) == port else f"{host}:{port}"

    path = parts.path or "/"
    if path != "/":
        path = path.rstrip("/") or "/"

    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if not key.lower().startswith(TRACKING_PARAM_PREFIXES)
    ]
    kept.sort(key=lambda kv: kv[0])
    query = urlencode(kept)

    return urlunsplit((scheme, netloc, path, query, ""))


def source_domain(url: str, fallback: Optional[str] = None) -> str:
    """Hostname of ``url``; ``fallback`` (or empty string) when it cannot be parsed."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        host = None
    if host:
        return host
    return fallback or ""
