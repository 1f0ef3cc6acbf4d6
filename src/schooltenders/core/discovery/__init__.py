"""Discovery of candidate listing URLs for a site."""

from .urls import DEFAULT_SCHEME, ConfigurationError, generate_candidate_urls

__all__ = [
    "DEFAULT_SCHEME",
    "ConfigurationError",
    "generate_candidate_urls",
]
