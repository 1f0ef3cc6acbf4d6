"""Normalization of locale-specific values found in announcements."""

from .dates import (
    BARE_DATE_PATTERN,
    DEADLINE_PATTERNS,
    PUBLISH_DATE_PATTERNS,
    DatePattern,
    extract_deadline,
    extract_publish_date,
    normalize_date,
    parse_date_text,
)

__all__ = [
    "BARE_DATE_PATTERN",
    "DEADLINE_PATTERNS",
    "PUBLISH_DATE_PATTERNS",
    "DatePattern",
    "extract_deadline",
    "extract_publish_date",
    "normalize_date",
    "parse_date_text",
]
