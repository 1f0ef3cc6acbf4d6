"""Extraction strategies for parsing tender announcements from HTML."""

from .base import (
    ELLIPSIS,
    SUMMARY_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Extractor,
    TenderCandidate,
    summarize,
    truncate_title,
)
from .heuristic_links import (
    HeuristicLinkExtractor,
    TenderExtractor,
    resolve_url,
    title_from_href,
)

__all__ = [
    "ELLIPSIS",
    "SUMMARY_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "Extractor",
    "TenderCandidate",
    "summarize",
    "truncate_title",
    "HeuristicLinkExtractor",
    "TenderExtractor",
    "resolve_url",
    "title_from_href",
]
