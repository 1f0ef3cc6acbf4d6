"""
Backend base classes and data structures.

Defines the interface contract for page-fetching backends and the
transient network errors they raise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class RequestSpec:
    """Specification for a GET request."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None  # None: backend default
    follow_redirects: bool = True


@dataclass
class FetchResult:
    """Result of a fetch operation."""

    url: str
    final_url: str  # After redirects
    status_code: int
    html: str
    headers: dict[str, str]

    elapsed_ms: float
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    retry_count: int = 0


class Backend(ABC):
    """Abstract base class for fetching backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier."""
        pass

    @abstractmethod
    async def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch a URL and return the response.

        Args:
            request: Request specification

        Returns:
            FetchResult with a 2xx response

        Raises:
            TransientNetworkError: On timeout, non-2xx status or connection failure
        """
        pass

    async def close(self) -> None:
        """Clean up backend resources."""
        pass

    async def __aenter__(self) -> "Backend":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class BackendError(Exception):
    """Base exception for backend errors."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class TransientNetworkError(BackendError):
    """A URL could not be retrieved right now; other URLs are unaffected."""
    pass


class FetchTimeout(TransientNetworkError):
    """The request exceeded its timeout."""
    pass


class HttpStatusError(TransientNetworkError):
    """The server answered with a non-2xx status."""
    pass


class ConnectionFailure(TransientNetworkError):
    """Connection, DNS, TLS or protocol failure."""
    pass
