"""
Page fetcher with per-URL failure isolation.

Wraps a backend so that every transient failure (timeout, non-2xx status,
connection/DNS error) becomes an "unavailable" outcome instead of an
exception. Callers treat all unavailable outcomes as "no content".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..backends.base import (
    Backend,
    FetchTimeout,
    HttpStatusError,
    RequestSpec,
    TransientNetworkError,
)


logger = logging.getLogger(__name__)


class Unavailability(str, Enum):
    """Why a page could not be retrieved."""

    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    CONNECTION = "connection"


@dataclass
class FetchOutcome:
    """Content of a page, or the reason it is unavailable."""

    url: str
    content: str | None = None
    reason: Unavailability | None = None
    status_code: int | None = None
    detail: str | None = None

    @property
    def available(self) -> bool:
        return self.content is not None

    @classmethod
    def unavailable(cls, url: str, error: TransientNetworkError) -> "FetchOutcome":
        if isinstance(error, FetchTimeout):
            reason = Unavailability.TIMEOUT
        elif isinstance(error, HttpStatusError):
            reason = Unavailability.HTTP_STATUS
        else:
            reason = Unavailability.CONNECTION
        return cls(url=url, reason=reason, status_code=error.status_code, detail=str(error))


class PageFetcher:
    """Retrieve pages through a backend without raising on network failures."""

    def __init__(self, backend: Backend, timeout: float = 15.0):
        self.backend = backend
        self.timeout = timeout

    async def fetch(self, url: str) -> FetchOutcome:
        """Fetch one URL.

        Args:
            url: Absolute URL

        Returns:
            FetchOutcome with content, or with the unavailability reason
        """
        logger.debug("Fetching %s", url, extra={"url": url})
        try:
            result = await self.backend.fetch(
                RequestSpec(url=url, timeout=self.timeout)
            )
        except TransientNetworkError as e:
            outcome = FetchOutcome.unavailable(url, e)
            logger.warning(
                "Unavailable %s (%s): %s",
                url,
                outcome.reason.value,
                e,
                extra={"url": url, "outcome": outcome.reason.value},
            )
            return outcome

        return FetchOutcome(url=url, content=result.html, status_code=result.status_code)

    async def close(self) -> None:
        await self.backend.close()
