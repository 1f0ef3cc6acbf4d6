"""
Extraction base classes and data structures.

Defines the candidate tender record and the interface for extractors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..config.vocabulary import TenderType


TITLE_MAX_LENGTH = 499
SUMMARY_MAX_LENGTH = 250
ELLIPSIS = "..."


def truncate_title(title: str) -> str:
    return title[:TITLE_MAX_LENGTH]


def summarize(text: str) -> str:
    """Cut text to the summary length, marking the cut with an ellipsis."""
    if len(text) > SUMMARY_MAX_LENGTH:
        return text[:SUMMARY_MAX_LENGTH] + ELLIPSIS
    return text


@dataclass
class TenderCandidate:
    """A tender announcement found on a page, before persistence.

    Dates are canonical ``YYYY-MM-DD`` strings; day/month ranges are
    checked but not month lengths, so the store converts them.
    """

    site_id: int
    title: str
    url: str
    type: TenderType = TenderType.BANDO
    deadline: str | None = None
    publish_date: str | None = None
    summary: str = ""
    last_checked: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("TenderCandidate requires a non-empty title")
        if not self.url:
            raise ValueError("TenderCandidate requires a URL")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "site_id": self.site_id,
            "title": self.title,
            "type": self.type.value,
            "deadline": self.deadline,
            "publish_date": self.publish_date,
            "url": self.url,
            "summary": self.summary,
            "last_checked": self.last_checked,
        }


class Extractor(ABC):
    """Abstract base class for tender extraction strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor identifier."""
        pass

    @abstractmethod
    def extract(self, html: str, url: str, site_id: int) -> list[TenderCandidate]:
        """Extract tender candidates from HTML content.

        Args:
            html: HTML content to parse
            url: URL the content was fetched from, for resolving links
            site_id: Site the page belongs to

        Returns:
            Candidates in document order (possibly empty)
        """
        pass
