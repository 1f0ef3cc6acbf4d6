"""Configuration loading and validation."""

from .loader import ConfigError, load_app_config
from .models import AppConfig, CrawlerConfig, DatabaseConfig, LoggingConfig
from .vocabulary import (
    DEFAULT_CANDIDATE_PATHS,
    TenderType,
    classify_tender_type,
    matches_tender_keyword,
)

__all__ = [
    # Config models
    "AppConfig",
    "CrawlerConfig",
    "DatabaseConfig",
    "LoggingConfig",
    # Vocabulary
    "DEFAULT_CANDIDATE_PATHS",
    "TenderType",
    "classify_tender_type",
    "matches_tender_keyword",
    # Loaders
    "ConfigError",
    "load_app_config",
]
