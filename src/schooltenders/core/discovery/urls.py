"""
Candidate URL generation for a school website.

Schools publish their website in the registry in many shapes
("www.school.edu.it", "http://school.gov.it/index.php", ...). The scanner
probes both schemes of the bare host, combined with each path where
tender listings are usually found, plus the declared URL itself.
"""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import urlsplit, urlunsplit

from ..config.vocabulary import DEFAULT_CANDIDATE_PATHS


DEFAULT_SCHEME = "http"

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_HOST_PATTERN = re.compile(r"^[\w.\-]+$|^[0-9a-f:.]+$", re.IGNORECASE)


class ConfigurationError(Exception):
    """A site's declared URL cannot be turned into a crawlable address."""

    def __init__(self, message: str, declared_url: str | None = None):
        super().__init__(message)
        self.declared_url = declared_url


def _parse_declared_url(declared_url: str) -> tuple[str, str]:
    """Return (host, normalized declared URL).

    Raises:
        ConfigurationError: If no hostname can be parsed
    """
    raw = (declared_url or "").strip()
    if not raw:
        raise ConfigurationError("Empty website URL", declared_url=declared_url)

    if not _SCHEME_PATTERN.match(raw):
        raw = f"{DEFAULT_SCHEME}://{raw}"

    try:
        parts = urlsplit(raw)
        # Accessing port validates it
        parts.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid website URL: {e}", declared_url=declared_url) from e

    host = parts.hostname
    if not host or not _HOST_PATTERN.match(host):
        raise ConfigurationError(f"Invalid website host in {declared_url!r}", declared_url=declared_url)

    if ":" in host:
        host = f"[{host}]"

    normalized = urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, ""))
    return host, normalized


def generate_candidate_urls(
    declared_url: str,
    paths: Iterable[str] = DEFAULT_CANDIDATE_PATHS,
) -> list[str]:
    """Build the deduplicated list of URLs to probe for one site.

    Order: https and http roots of the bare host, then each path suffix on
    both schemes, then the declared URL when it differs from all of those.

    Args:
        declared_url: Website as recorded in the registry (scheme optional)
        paths: Path suffixes likely to host tender listings

    Returns:
        Absolute URLs, without duplicates

    Raises:
        ConfigurationError: If the declared URL cannot be parsed
    """
    host, declared = _parse_declared_url(declared_url)

    https_root = f"https://{host}"
    http_root = f"http://{host}"

    candidates: dict[str, None] = {https_root: None, http_root: None}
    for path in paths:
        path = "/" + path.strip().lstrip("/")
        candidates[f"{https_root}{path}"] = None
        candidates[f"{http_root}{path}"] = None

    if declared.rstrip("/") not in candidates:
        candidates[declared] = None

    return list(candidates)
