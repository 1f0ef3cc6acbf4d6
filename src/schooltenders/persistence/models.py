"""
SQLAlchemy ORM models for SchoolTenders.

Defines the database schema:
- Schools: registry of sites to scan (owned by the registry importer)
- Tenders: announcements found on school websites
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


# =============================================================================
# School Model
# =============================================================================


class School(Base):
    """A school from the national registry; read-only to the scanner."""

    __tablename__ = "schools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)

    tenders: Mapped[list["Tender"]] = relationship("Tender", back_populates="school")

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name='{self.name}')>"


# =============================================================================
# Tender Model
# =============================================================================


class Tender(Base):
    """A tender announcement published on a school website.

    Identified by (site_id, url); rescans update the mutable fields in place.
    """

    __tablename__ = "tenders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="Bando")
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    publish_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # 700 chars keeps the (site_id, url) key within MySQL's utf8mb4 index limit
    url: Mapped[str] = mapped_column(String(700), nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_checked: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    school: Mapped["School"] = relationship("School", back_populates="tenders")

    __table_args__ = (
        UniqueConstraint("site_id", "url", name="uq_tender_site_url"),
        Index("ix_tender_type_deadline", "type", "deadline"),
    )

    def __repr__(self) -> str:
        return f"<Tender(id={self.id}, site_id={self.site_id}, title='{self.title[:50]}...')>"


# Columns an upsert may overwrite on conflict
MUTABLE_TENDER_FIELDS = ("title", "type", "deadline", "publish_date", "summary", "last_checked")
