"""
Tender scan orchestrator.

Coordinates the per-site workflow: validate -> generate candidate URLs ->
fetch -> extract -> store, and fans sites out over a bounded worker pool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine

from schooltenders.core.backends.base import Backend
from schooltenders.core.backends.http_backend import HttpBackend
from schooltenders.core.config.loader import load_app_config
from schooltenders.core.config.models import AppConfig, CrawlerConfig
from schooltenders.core.discovery.urls import ConfigurationError, generate_candidate_urls
from schooltenders.core.extract.base import Extractor
from schooltenders.core.extract.heuristic_links import HeuristicLinkExtractor
from schooltenders.core.fetch.fetcher import PageFetcher
from schooltenders.core.logging import get_contextual_logger, setup_logging
from schooltenders.persistence.db import create_db_engine, create_session_factory, session_scope
from schooltenders.persistence.repo import Site, SiteRepository, TenderStore

from .pool import WorkerPool


logger = logging.getLogger(__name__)


class ScanStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class ScanResult:
    """Outcome of scanning one site."""

    site_id: int | None
    name: str
    status: ScanStatus
    found_tenders: int = 0
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "site_id": self.site_id,
            "name": self.name,
            "status": self.status.value,
            "found_tenders": self.found_tenders,
            "message": self.message,
        }


class TenderScanner:
    """Scans school websites for tender announcements.

    Collaborators are injected: a PageFetcher for network access, a
    TenderStore (anything with ``upsert_many``) for persistence and an
    Extractor for parsing. The scanner holds no state between runs.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        store: TenderStore,
        extractor: Extractor | None = None,
        config: CrawlerConfig | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.extractor = extractor or HeuristicLinkExtractor()
        self.config = config or CrawlerConfig()

    async def scan_one(self, site: Site) -> ScanResult:
        """Scan a single site; never raises.

        Args:
            site: Site to scan

        Returns:
            ScanResult with the number of tenders persisted
        """
        log = get_contextual_logger("scanner", site=site.display_name, site_id=site.id)

        if site.id is None or not (site.declared_url or "").strip():
            log.warning("Site has no id or website, not scanned")
            return ScanResult(
                site.id, site.display_name, ScanStatus.ERROR, message="missing site id or website"
            )

        try:
            urls = generate_candidate_urls(site.declared_url, self.config.candidate_paths)
        except ConfigurationError as e:
            log.warning("Invalid website URL %r: %s", site.declared_url, e)
            return ScanResult(site.id, site.display_name, ScanStatus.ERROR, message="invalid website URL")

        log.debug("Checking %d candidate URL(s)", len(urls))
        found = 0

        async def process(url: str) -> int:
            nonlocal found
            outcome = await self.fetcher.fetch(url)
            if not outcome.available:
                return 0

            candidates = self.extractor.extract(outcome.content, url, site.id)
            if not candidates:
                return 0

            stored = await self.store.upsert_many(candidates)
            found += stored
            log.debug(
                "Stored %d of %d candidate(s) from %s",
                stored,
                len(candidates),
                url,
                extra={"url": url},
            )
            return stored

        try:
            results = await WorkerPool(self.config.url_concurrency).map(process, urls)
            for result in results:
                if isinstance(result, BaseException):
                    raise result
        except Exception as e:
            log.exception("Scan failed after %d tender(s): %s", found, e)
            return ScanResult(
                site.id, site.display_name, ScanStatus.ERROR, found_tenders=found, message=str(e)
            )

        log.info("Found %d tender(s)", found, extra={"outcome": ScanStatus.SUCCESS.value})
        return ScanResult(site.id, site.display_name, ScanStatus.SUCCESS, found_tenders=found)

    async def _scan_member(self, site: Site) -> ScanResult:
        """Scan one site of a batch; sites without a website are skipped."""
        if not (site.declared_url or "").strip():
            return ScanResult(site.id, site.display_name, ScanStatus.SKIPPED, message="no website")

        try:
            return await self.scan_one(site)
        except Exception as e:
            logger.exception("Unexpected failure scanning site %s", site.id)
            return ScanResult(site.id, site.display_name, ScanStatus.ERROR, message=str(e))

    async def scan_batch(self, sites: Sequence[Site]) -> list[ScanResult]:
        """Scan sites concurrently; results follow input order."""
        pool = WorkerPool(self.config.site_concurrency)
        results = await pool.map(self._scan_member, sites)

        for result in results:
            if isinstance(result, BaseException):
                raise result

        summarize_batch(results)
        return results

    async def iter_scan_batch(self, sites: Sequence[Site]) -> AsyncIterator[ScanResult]:
        """Scan sites concurrently, yielding each result as it completes."""
        pool = WorkerPool(self.config.site_concurrency)
        async for result in pool.as_completed(self._scan_member, sites):
            if isinstance(result, Exception):
                raise result
            yield result


def summarize_batch(results: Sequence[ScanResult]) -> dict[str, int]:
    """Count results per status and log the batch outcome."""
    counts = {status.value: 0 for status in ScanStatus}
    for result in results:
        counts[result.status.value] += 1
    total = sum(r.found_tenders for r in results)

    logger.info(
        "Batch finished: %d site(s), %d success, %d error, %d skipped, %d tender(s)",
        len(results),
        counts["success"],
        counts["error"],
        counts["skipped"],
        total,
    )
    return counts


async def scan_site_ids(
    site_ids: Sequence[int],
    config: AppConfig | None = None,
    *,
    engine: AsyncEngine | None = None,
    backend: Backend | None = None,
) -> list[ScanResult]:
    """Convenience function to scan registry sites by ID.

    Args:
        site_ids: Site IDs to scan; unknown IDs are logged and ignored
        config: Application configuration (loaded from disk if not provided)
        engine: Database engine (created from config and disposed if not provided)
        backend: Fetch backend (HttpBackend from config if not provided)

    Returns:
        One ScanResult per known site, in the order requested
    """
    if config is None:
        config = load_app_config()
        setup_logging(
            level=config.logging.level,
            log_file=config.logging.file,
            json_format=config.logging.json_format,
            rich_console=config.logging.rich_console,
        )

    crawler = config.crawler
    owns_engine = engine is None
    if engine is None:
        engine = create_db_engine(
            config.database.url,
            echo=config.database.echo,
            pool_size=config.database.pool_size,
        )
    if backend is None:
        backend = HttpBackend(
            timeout=crawler.timeout_seconds,
            max_retries=crawler.max_retries,
            user_agent=crawler.user_agent,
            max_connections=crawler.max_connections,
        )
    fetcher = PageFetcher(backend, timeout=crawler.timeout_seconds)

    try:
        async with session_scope(create_session_factory(engine)) as session:
            sites = await SiteRepository(session).get_many(site_ids)

        missing = set(site_ids) - {site.id for site in sites}
        if missing:
            logger.warning("Unknown site id(s): %s", ", ".join(map(str, sorted(missing))))

        scanner = TenderScanner(fetcher, TenderStore(engine), config=crawler)
        return await scanner.scan_batch(sites)
    finally:
        await fetcher.close()
        if owns_engine:
            await engine.dispose()
