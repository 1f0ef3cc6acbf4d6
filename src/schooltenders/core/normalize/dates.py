"""
Italian date normalization.

Announcements on school sites carry dates as free text such as
"scade il 15/06/2025" or "Data pubblicazione: 3-9-24". Each field is
scanned with its own ordered list of labeled patterns; the first pattern
that yields a plausible day/month/year wins and is rendered as YYYY-MM-DD.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


# day, month, year (2 or 4 digits); "/" or "-" separated
DATE_BODY = r"(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})(?!\d)"


@dataclass(frozen=True)
class DatePattern:
    """A labeled regex capturing day, month and year groups, in that order."""

    label: str
    regex: re.Pattern[str]

    @classmethod
    def labeled(cls, label: str, prefix: str) -> "DatePattern":
        """Build a pattern matching ``prefix`` followed by a date."""
        return cls(label, re.compile(prefix + DATE_BODY, re.IGNORECASE))


DEADLINE_PATTERNS: tuple[DatePattern, ...] = (
    DatePattern.labeled("scade_il", r"scade\s+il\s+"),
    # also matches "data scadenza:"
    DatePattern.labeled("scadenza", r"scadenza:?\s*"),
    DatePattern.labeled("termine_presentazione", r"termine\s+presentazione\s+domande:\s*"),
)

PUBLISH_DATE_PATTERNS: tuple[DatePattern, ...] = (
    DatePattern.labeled("pubblicato_il", r"pubblicato\s+il\s+"),
    DatePattern.labeled("data_pubblicazione", r"data\s+pubblicazione:\s*"),
)

BARE_DATE_PATTERN = DatePattern("bare", re.compile(r"(?<!\d)" + DATE_BODY))


def _to_iso(day: int, month: int, year: int) -> str | None:
    if year < 100:
        year += 2000
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def normalize_date(text: str | None, patterns: tuple[DatePattern, ...] | list[DatePattern]) -> str | None:
    """Find the first valid date in ``text`` using ``patterns`` in order.

    Only the first occurrence of each pattern is considered. A match whose
    day or month is out of range counts as no match and the next pattern is
    tried. Days are not checked against the month length, so 31/02 passes.

    Args:
        text: Free text to scan
        patterns: Ordered labeled patterns

    Returns:
        Canonical ``YYYY-MM-DD`` string, or None if no pattern yields a date
    """
    if not text:
        return None

    for pattern in patterns:
        match = pattern.regex.search(text)
        if not match:
            continue
        day, month, year = (int(group) for group in match.groups()[-3:])
        iso = _to_iso(day, month, year)
        if iso:
            return iso

    return None


def parse_date_text(text: str | None) -> str | None:
    """Normalize a bare ``DD/MM/YY[YY]`` or ``DD-MM-YY[YY]`` date."""
    return normalize_date(text, (BARE_DATE_PATTERN,))


def extract_deadline(text: str | None) -> str | None:
    """Extract a submission deadline from announcement text."""
    return normalize_date(text, DEADLINE_PATTERNS)


def extract_publish_date(text: str | None) -> str | None:
    """Extract a publication date from announcement text."""
    return normalize_date(text, PUBLISH_DATE_PATTERNS)
