"""
HTTP Backend implementation using httpx.

Provides async HTTP fetching with:
- A descriptive client identifier on every request
- Per-request timeout
- Retry with exponential backoff on connection failures
"""

from __future__ import annotations

import time

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config.models import DEFAULT_USER_AGENT
from .base import (
    Backend,
    ConnectionFailure,
    FetchResult,
    FetchTimeout,
    HttpStatusError,
    RequestSpec,
)


# Retried transport failures; timeouts are never retried
RETRYABLE_ERRORS = (httpx.ConnectError, httpx.RemoteProtocolError)


class HttpBackend(Backend):
    """HTTP backend using httpx for async requests.

    Features:
    - Persistent connection pooling
    - Automatic redirect following
    - Retry with exponential backoff
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_retries: int = 2,
        user_agent: str | None = None,
        default_headers: dict[str, str] | None = None,
        max_connections: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize HTTP backend.

        Args:
            timeout: Default request timeout in seconds
            max_retries: Maximum attempts on connection failures
            user_agent: Client identifier (default: browser UA plus bot token)
            default_headers: Default headers for all requests
            max_connections: Connection pool size
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.max_connections = max_connections
        self._transport = transport

        self.default_headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "it-IT,it;q=0.9,en;q=0.5",
            **(default_headers or {}),
        }

        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "http"

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=self.default_headers,
                limits=httpx.Limits(
                    max_connections=self.max_connections,
                    max_keepalive_connections=max(1, self.max_connections // 2),
                ),
                transport=self._transport,
            )
        return self._client

    async def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch a URL with retry on connection failures.

        Args:
            request: Request specification

        Returns:
            FetchResult for a 2xx response

        Raises:
            FetchTimeout: Request timed out
            HttpStatusError: Non-2xx response
            ConnectionFailure: Connection/DNS/protocol failure after retries
        """
        client = await self._ensure_client()
        headers = {**self.default_headers, **request.headers}
        timeout = httpx.Timeout(request.timeout or self.timeout)

        retry_count = 0

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=True,
            ):
                with attempt:
                    retry_count = attempt.retry_state.attempt_number - 1
                    start = time.perf_counter()

                    response = await client.get(
                        request.url,
                        headers=headers,
                        timeout=timeout,
                        follow_redirects=request.follow_redirects,
                    )

                    elapsed_ms = (time.perf_counter() - start) * 1000

        except httpx.TimeoutException as e:
            raise FetchTimeout(
                f"Timeout after {request.timeout or self.timeout:g}s",
                url=request.url,
                cause=e,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ConnectionFailure(
                f"Transport error after {retry_count + 1} attempt(s): {e}",
                url=request.url,
                cause=e,
            ) from e

        if not 200 <= response.status_code < 300:
            raise HttpStatusError(
                f"Status {response.status_code}",
                url=request.url,
                status_code=response.status_code,
            )

        html = response.text

        return FetchResult(
            url=request.url,
            final_url=str(response.url),
            status_code=response.status_code,
            html=html,
            headers=dict(response.headers),
            elapsed_ms=elapsed_ms,
            retry_count=retry_count,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
