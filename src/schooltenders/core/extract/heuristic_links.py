"""
Heuristic link/article extraction for school "albo" pages.

School websites are built on dozens of CMS themes, so nothing is assumed
about layout. Every link and every news-like container is a potential
announcement; tender keywords decide which ones are kept.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from urllib.parse import unquote, urljoin, urlsplit

from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from ..config.vocabulary import (
    CONTAINER_SELECTORS,
    DOCUMENT_EXTENSION,
    LINK_SELECTOR,
    TITLE_SELECTORS,
    classify_tender_type,
    matches_tender_keyword,
)
from ..normalize.dates import extract_deadline, extract_publish_date
from .base import Extractor, TenderCandidate, summarize, truncate_title


logger = logging.getLogger(__name__)


def _clean_text(text: str | None) -> str:
    """Normalize whitespace in text."""
    return re.sub(r"\s+", " ", text).strip() if text else ""


def _parse_document(html: str) -> HtmlElement:
    """Parse HTML, tolerating XHTML pages that carry an XML encoding declaration."""
    try:
        return lxml_html.fromstring(html)
    except ValueError:
        # lxml refuses str input with an encoding declaration
        return lxml_html.fromstring(html.encode("utf-8"))


def resolve_url(href: str | None, base_url: str) -> str | None:
    """Resolve a link against the page URL; None unless absolute http(s)."""
    if not href or not href.strip():
        return None
    try:
        absolute = urljoin(base_url, href.strip())
        parts = urlsplit(absolute)
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return None
    return absolute


def title_from_href(href: str, base_url: str) -> str:
    """Derive a title from a link's file name, e.g. 'Bando_mensa_2025.pdf'."""
    try:
        path = urlsplit(urljoin(base_url, href.strip())).path
    except ValueError:
        return ""
    last_segment = path.rsplit("/", 1)[-1]
    if not last_segment:
        return ""
    name = DOCUMENT_EXTENSION.sub("", unquote(last_segment))
    return _clean_text(name.replace("_", " "))


class HeuristicLinkExtractor(Extractor):
    """Extract tender candidates from links and news-item containers.

    Elements are visited in document order. Each one yields at most one
    candidate, and only when it has a title, contains a tender keyword and
    links to a resolvable URL.
    """

    def __init__(
        self,
        *,
        container_selectors: tuple[str, ...] = CONTAINER_SELECTORS,
        title_selectors: tuple[str, ...] = TITLE_SELECTORS,
    ) -> None:
        self.selector = ", ".join((LINK_SELECTOR, *container_selectors))
        self.title_selector = ", ".join(title_selectors)

    @property
    def name(self) -> str:
        return "heuristic_links"

    def extract(self, html: str, url: str, site_id: int) -> list[TenderCandidate]:
        """Extract tender candidates from a fetched page.

        Args:
            html: HTML content
            url: URL the page was fetched from
            site_id: Site the page belongs to

        Returns:
            Candidates in document order
        """
        if not html or not html.strip():
            return []

        try:
            doc = _parse_document(html)
        except (etree.ParserError, ValueError) as e:
            logger.warning("Failed to parse HTML from %s: %s", url, e, extra={"url": url})
            return []

        checked_at = datetime.now(timezone.utc)
        candidates: list[TenderCandidate] = []

        for element in doc.cssselect(self.selector):
            candidate = self._extract_element(element, url, site_id, checked_at)
            if candidate is not None:
                candidates.append(candidate)

        logger.debug(
            "%d tender candidate(s) on %s", len(candidates), url, extra={"url": url}
        )
        return candidates

    def _extract_element(
        self,
        element: HtmlElement,
        base_url: str,
        site_id: int,
        checked_at: datetime,
    ) -> TenderCandidate | None:
        """Build a candidate from one link or container, or None to skip it."""
        if element.tag == "a":
            title = _clean_text(element.text_content())
            href = element.get("href")
            text = title
        else:
            title = self._container_title(element)
            links = element.xpath(".//a[@href]")
            href = links[0].get("href") if links else None
            text = _clean_text(element.text_content())

        if not title and href:
            title = title_from_href(href, base_url)

        if not title or not matches_tender_keyword(title, text):
            return None

        item_url = resolve_url(href, base_url)
        if item_url is None:
            logger.debug("Unresolvable link %r for %r", href, title[:80], extra={"url": base_url})
            return None

        markup = lxml_html.tostring(element, encoding="unicode", with_tail=False)
        full_text = f"{title} {text} {markup}"

        return TenderCandidate(
            site_id=site_id,
            title=truncate_title(title),
            type=classify_tender_type(title),
            deadline=extract_deadline(full_text),
            publish_date=extract_publish_date(full_text),
            url=item_url,
            summary=summarize(text),
            last_checked=checked_at,
        )

    def _container_title(self, element: HtmlElement) -> str:
        """First non-empty heading/title-class text, else the first nested link text."""
        for heading in element.cssselect(self.title_selector):
            if heading is element:
                continue
            title = _clean_text(heading.text_content())
            if title:
                return title

        links = element.xpath(".//a")
        if links:
            return _clean_text(links[0].text_content())

        return ""


# Default extractor used by the scanner
TenderExtractor = HeuristicLinkExtractor
