"""
Italian school-site vocabulary used by discovery and extraction.

Path suffixes where school websites usually publish their "albo" and
tender listings, CSS selectors for announcement containers, and the
keyword patterns that identify and classify a tender.
"""

from __future__ import annotations

import re
from enum import Enum


class TenderType(str, Enum):
    """Kind of procurement/competition announcement."""

    BANDO = "Bando"
    AVVISO = "Avviso"
    CONCORSO = "Concorso"
    DETERMINA = "Determina"
    GARA = "Gara"


DEFAULT_CANDIDATE_PATHS: tuple[str, ...] = (
    "/albo-pretorio",
    "/bandi-gara",
    "/gare",
    "/avvisi",
    "/concorsi",
    "/determine-a-contrarre",
)

LINK_SELECTOR = "a"

CONTAINER_SELECTORS: tuple[str, ...] = (
    "article",
    ".item",
    ".post",
    ".entry",
    ".news-item",
    ".avviso",
    ".bando",
)

TITLE_SELECTORS: tuple[str, ...] = (
    "h1",
    "h2",
    "h3",
    ".title",
    ".entry-title",
)

TENDER_KEYWORDS: tuple[re.Pattern[str], ...] = (
    re.compile(r"bando", re.IGNORECASE),
    re.compile(r"gara", re.IGNORECASE),
    re.compile(r"avviso", re.IGNORECASE),
    re.compile(r"concorso", re.IGNORECASE),
    re.compile(r"determina\s+a\s+contrarre", re.IGNORECASE),
    re.compile(r"selezione", re.IGNORECASE),
    re.compile(r"affidamento", re.IGNORECASE),
)

# Classification priority: first match against the title wins
TYPE_KEYWORDS: tuple[tuple[TenderType, re.Pattern[str]], ...] = (
    (TenderType.AVVISO, re.compile(r"avviso", re.IGNORECASE)),
    (TenderType.CONCORSO, re.compile(r"concorso", re.IGNORECASE)),
    (TenderType.DETERMINA, re.compile(r"determina", re.IGNORECASE)),
    (TenderType.GARA, re.compile(r"gara", re.IGNORECASE)),
)

DEFAULT_TENDER_TYPE = TenderType.BANDO

DOCUMENT_EXTENSION = re.compile(r"\.(pdf|doc|docx|zip|p7m)$", re.IGNORECASE)


def matches_tender_keyword(*texts: str | None) -> bool:
    """Check whether any text contains a tender keyword."""
    for text in texts:
        if not text:
            continue
        if any(pattern.search(text) for pattern in TENDER_KEYWORDS):
            return True
    return False


def classify_tender_type(title: str) -> TenderType:
    """Classify an announcement by the first type keyword found in its title."""
    for tender_type, pattern in TYPE_KEYWORDS:
        if pattern.search(title):
            return tender_type
    return DEFAULT_TENDER_TYPE
