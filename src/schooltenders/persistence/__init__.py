"""Database persistence layer."""

from .db import (
    create_db_engine,
    create_session_factory,
    init_db_async,
    session_scope,
)
from .models import MUTABLE_TENDER_FIELDS, Base, School, Tender
from .repo import (
    PersistenceFieldError,
    Site,
    SiteRepository,
    StorageErrorCategory,
    TenderStore,
    classify_storage_error,
)

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "init_db_async",
    "session_scope",
    "MUTABLE_TENDER_FIELDS",
    "Base",
    "School",
    "Tender",
    "PersistenceFieldError",
    "Site",
    "SiteRepository",
    "StorageErrorCategory",
    "TenderStore",
    "classify_storage_error",
]
