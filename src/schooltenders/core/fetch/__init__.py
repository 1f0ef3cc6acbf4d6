"""Fetch utilities - failure-isolated page retrieval."""

from .fetcher import FetchOutcome, PageFetcher, Unavailability

__all__ = [
    "FetchOutcome",
    "PageFetcher",
    "Unavailability",
]
