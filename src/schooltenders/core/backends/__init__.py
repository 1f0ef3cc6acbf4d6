"""Backend implementations for fetching pages."""

from .base import (
    Backend,
    BackendError,
    ConnectionFailure,
    FetchResult,
    FetchTimeout,
    HttpStatusError,
    RequestSpec,
    TransientNetworkError,
)
from .http_backend import HttpBackend

__all__ = [
    # Base classes
    "Backend",
    "RequestSpec",
    "FetchResult",
    # Errors
    "BackendError",
    "TransientNetworkError",
    "FetchTimeout",
    "HttpStatusError",
    "ConnectionFailure",
    # HTTP backend
    "HttpBackend",
]
