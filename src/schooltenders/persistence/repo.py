"""
Repository pattern for database operations.

Provides the read side of the school registry and the idempotent tender
store. Tenders are keyed by (site_id, url); every write is a single
dialect-native insert-or-update in its own transaction.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timezone
from enum import Enum
from typing import Any, Iterable, Sequence

from sqlalchemy import String, select
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from ..core.extract.base import TenderCandidate
from .db import create_session_factory, session_scope
from .models import MUTABLE_TENDER_FIELDS, School, Tender


logger = logging.getLogger(__name__)

DATE_FIELDS = ("deadline", "publish_date")


# =============================================================================
# Site Repository
# =============================================================================


@dataclass(frozen=True)
class Site:
    """A school website to scan, as supplied by the registry."""

    id: int | None
    display_name: str
    declared_url: str | None

    @classmethod
    def from_school(cls, school: School) -> "Site":
        return cls(id=school.id, display_name=school.name, declared_url=school.website)


class SiteRepository:
    """Read-only access to the school registry."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, site_id: int) -> Site | None:
        """Get a site by ID."""
        school = await self.session.get(School, site_id)
        return Site.from_school(school) if school is not None else None

    async def get_many(self, site_ids: Sequence[int]) -> list[Site]:
        """Get sites by ID, in the order requested; unknown IDs are omitted."""
        if not site_ids:
            return []
        stmt = select(School).where(School.id.in_(site_ids))
        schools = {school.id: school for school in (await self.session.execute(stmt)).scalars()}
        return [Site.from_school(schools[i]) for i in site_ids if i in schools]

    async def get_all(self, with_website_only: bool = False) -> list[Site]:
        """Get all sites, ordered by ID."""
        stmt = select(School).order_by(School.id)
        if with_website_only:
            stmt = stmt.where(School.website.is_not(None), School.website != "")
        result = await self.session.execute(stmt)
        return [Site.from_school(school) for school in result.scalars()]


# =============================================================================
# Storage Errors
# =============================================================================


class StorageErrorCategory(str, Enum):
    """Why a tender record could not be written."""

    FIELD_TOO_LONG = "field_too_long"
    INVALID_DATE = "invalid_date"
    OTHER = "other"


# Categories fixed by nulling the offending fields and writing once more
RECOVERABLE_CATEGORIES = frozenset({StorageErrorCategory.INVALID_DATE})


class PersistenceFieldError(Exception):
    """A tender record was rejected by validation or by the database."""

    def __init__(
        self,
        message: str,
        category: StorageErrorCategory = StorageErrorCategory.OTHER,
        fields: tuple[str, ...] = (),
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.fields = fields
        self.cause = cause

    @property
    def recoverable(self) -> bool:
        return self.category in RECOVERABLE_CATEGORIES


_TOO_LONG_MARKERS = (
    "data too long",  # MySQL 1406
    "value too long",  # PostgreSQL 22001
    "string data, right truncated",
)
_INVALID_DATE_MARKERS = (
    "incorrect date value",  # MySQL 1292
    "date/time field value out of range",  # PostgreSQL 22008
    "invalid input syntax for type date",  # PostgreSQL 22007
    "invalid date",
)
_COLUMN_PATTERN = re.compile(r"column\s+['\"`]?(\w+)['\"`]?", re.IGNORECASE)


def classify_storage_error(exc: Exception) -> PersistenceFieldError:
    """Map a database error onto a storage error category."""
    cause = getattr(exc, "orig", None) or exc
    message = str(cause)
    lowered = message.lower()

    if any(marker in lowered for marker in _TOO_LONG_MARKERS):
        category = StorageErrorCategory.FIELD_TOO_LONG
    elif any(marker in lowered for marker in _INVALID_DATE_MARKERS):
        category = StorageErrorCategory.INVALID_DATE
    else:
        category = StorageErrorCategory.OTHER

    fields = tuple(
        name for name in _COLUMN_PATTERN.findall(message) if name in Tender.__table__.columns
    )
    if category is StorageErrorCategory.INVALID_DATE:
        # Unnamed date columns: null every date
        fields = tuple(f for f in fields if f in DATE_FIELDS) or DATE_FIELDS

    return PersistenceFieldError(message, category, fields, cause=exc)


# =============================================================================
# Tender Store
# =============================================================================


def _column_lengths() -> dict[str, int]:
    return {
        column.name: column.type.length
        for column in Tender.__table__.columns
        if isinstance(column.type, String) and column.type.length
    }


class TenderStore:
    """Idempotent writer for tender candidates.

    Each candidate is written in its own session acquired from the injected
    engine; a rejected record is logged and skipped without aborting the
    rest of the batch.
    """

    SUPPORTED_DIALECTS = ("sqlite", "postgresql", "mysql")

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.dialect = engine.dialect.name
        if self.dialect not in self.SUPPORTED_DIALECTS:
            raise ValueError(f"Unsupported database dialect: {self.dialect}")
        self.session_factory = create_session_factory(engine)
        self.column_lengths = _column_lengths()

    async def upsert_many(self, candidates: Iterable[TenderCandidate]) -> int:
        """Insert or update each candidate.

        Returns:
            Number of records successfully inserted or updated
        """
        stored = 0
        for candidate in candidates:
            if await self.upsert(candidate):
                stored += 1
        return stored

    async def upsert(self, candidate: TenderCandidate) -> bool:
        """Write one candidate, retrying once without bad dates if needed."""
        try:
            await self._write(self._row_values(candidate))
            return True
        except PersistenceFieldError as e:
            error = e

        if not error.recoverable:
            self._log_skip(candidate, error)
            return False

        logger.info(
            "Retrying %s with %s cleared (%s)",
            candidate.url,
            ", ".join(error.fields),
            error.message,
            extra={"site_id": candidate.site_id, "url": candidate.url},
        )
        try:
            await self._write(self._row_values(candidate, cleared=error.fields))
            return True
        except PersistenceFieldError as e:
            self._log_skip(candidate, e)
            return False

    def _row_values(
        self,
        candidate: TenderCandidate,
        cleared: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Build column values, validating lengths and dates before the write."""
        values: dict[str, Any] = {
            "site_id": candidate.site_id,
            "title": candidate.title,
            "type": candidate.type.value,
            "url": candidate.url,
            "summary": candidate.summary,
            "last_checked": candidate.last_checked.astimezone(timezone.utc).replace(tzinfo=None),
        }

        too_long = tuple(
            name
            for name, limit in self.column_lengths.items()
            if isinstance(values.get(name), str) and len(values[name]) > limit
        )
        if too_long:
            raise PersistenceFieldError(
                f"Value too long for column(s): {', '.join(too_long)}",
                StorageErrorCategory.FIELD_TOO_LONG,
                too_long,
            )

        invalid_dates = []
        for name in DATE_FIELDS:
            raw = None if name in cleared else getattr(candidate, name)
            try:
                values[name] = date.fromisoformat(raw) if raw else None
            except ValueError:
                invalid_dates.append(name)
        if invalid_dates:
            raise PersistenceFieldError(
                f"Invalid date in column(s): {', '.join(invalid_dates)}",
                StorageErrorCategory.INVALID_DATE,
                tuple(invalid_dates),
            )

        return values

    def _upsert_statement(self, values: dict[str, Any]):
        if self.dialect == "mysql":
            stmt = mysql_insert(Tender).values(**values)
            return stmt.on_duplicate_key_update(
                {name: stmt.inserted[name] for name in MUTABLE_TENDER_FIELDS}
            )

        insert = pg_insert if self.dialect == "postgresql" else sqlite_insert
        stmt = insert(Tender).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=["site_id", "url"],
            set_={name: stmt.excluded[name] for name in MUTABLE_TENDER_FIELDS},
        )

    async def _write(self, values: dict[str, Any]) -> None:
        try:
            async with session_scope(self.session_factory) as session:
                await session.execute(self._upsert_statement(values))
        except SQLAlchemyError as e:
            raise classify_storage_error(e) from e

    def _log_skip(self, candidate: TenderCandidate, error: PersistenceFieldError) -> None:
        logger.warning(
            "Skipped tender %r (%s): %s",
            candidate.title[:80],
            error.category.value,
            error.message,
            extra={"site_id": candidate.site_id, "url": candidate.url, "outcome": error.category.value},
        )
