"""
Pydantic configuration models for SchoolTenders.

These models provide type-safe configuration with validation for:
- Crawler settings (candidate paths, timeouts, concurrency)
- Database connection
- Logging
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .vocabulary import DEFAULT_CANDIDATE_PATHS


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 SchoolTenderFinderBot/1.0"
)


# =============================================================================
# Crawler Configuration
# =============================================================================


class CrawlerConfig(BaseModel):
    """Settings for candidate URL generation, fetching and scan concurrency."""

    candidate_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CANDIDATE_PATHS),
        description="Path suffixes likely to host tender listings",
    )
    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=300.0,
        description="Per-request timeout in seconds",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="Client identifier sent with every request",
    )
    max_retries: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Attempts per URL on connection failures (timeouts are never retried)",
    )
    url_concurrency: int = Field(
        default=4,
        ge=1,
        le=50,
        description="Candidate URLs fetched concurrently for one site",
    )
    site_concurrency: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Sites scanned concurrently in a batch",
    )
    max_connections: int = Field(
        default=20,
        ge=1,
        description="Upper bound on open HTTP connections",
    )

    @field_validator("candidate_paths")
    @classmethod
    def normalize_paths(cls, v: list[str]) -> list[str]:
        """Ensure each path starts with a single slash and drop duplicates."""
        paths: list[str] = []
        for path in v:
            path = path.strip()
            if not path:
                continue
            path = "/" + path.lstrip("/")
            if path not in paths:
                paths.append(path)
        return paths


# =============================================================================
# Database Configuration
# =============================================================================


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = Field(
        default="sqlite:///data/schooltenders.db",
        description="SQLAlchemy database URL (sync form, async driver is derived)",
    )
    echo: bool = Field(
        default=False,
        description="Log SQL statements",
    )
    pool_size: int = Field(
        default=5,
        ge=1,
        description="Connection pool size (ignored for SQLite)",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    file: Path | None = Field(
        default=Path("logs/schooltenders.log"),
        description="Log file path (None disables file logging)",
    )
    json_format: bool = Field(
        default=True,
        description="Write JSON lines to the log file",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


# =============================================================================
# Root Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
