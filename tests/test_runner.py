"""Tests for the scan orchestrator with fake collaborators."""

import asyncio
import logging

import httpx
from sqlalchemy import select

from schooltenders.core.backends import HttpBackend
from schooltenders.core.config import AppConfig, CrawlerConfig, LoggingConfig
from schooltenders.core.fetch import FetchOutcome, Unavailability
from schooltenders.core.orchestrator import (
    ScanStatus,
    TenderScanner,
    WorkerPool,
    scan_site_ids,
)
from schooltenders.core.orchestrator import runner
from schooltenders.persistence import Site, Tender, create_session_factory, session_scope


class FakeFetcher:
    """Serves pages from a dict; unknown URLs are 404s."""

    def __init__(self, pages=None, timeouts=(), crash_hosts=(), delay=0.0):
        self.pages = pages or {}
        self.timeouts = set(timeouts)
        self.crash_hosts = set(crash_hosts)
        self.delay = delay
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        if any(host in url for host in self.crash_hosts):
            raise RuntimeError("parser exploded")
        if url in self.timeouts:
            await asyncio.sleep(self.delay)
            return FetchOutcome(url=url, reason=Unavailability.TIMEOUT)
        if url in self.pages:
            return FetchOutcome(url=url, content=self.pages[url], status_code=200)
        return FetchOutcome(url=url, reason=Unavailability.HTTP_STATUS, status_code=404)


class FakeStore:
    def __init__(self):
        self.stored = []

    async def upsert_many(self, candidates):
        self.stored.extend(candidates)
        return len(candidates)


CONFIG = CrawlerConfig(candidate_paths=["/albo-pretorio", "/gare"])


def make_scanner(fetcher, store=None):
    return TenderScanner(fetcher, store or FakeStore(), config=CONFIG)


async def test_scan_one_counts_persisted_tenders(albo_page):
    fetcher = FakeFetcher(pages={"https://scuola-a.it/albo-pretorio": albo_page})
    store = FakeStore()

    result = await make_scanner(fetcher, store).scan_one(Site(1, "Scuola A", "scuola-a.it"))

    assert result.status is ScanStatus.SUCCESS
    assert result.found_tenders == 1
    assert store.stored[0].url == "https://scuola-a.it/bando1.pdf"
    assert len(fetcher.calls) == 6
    assert result.to_dict() == {
        "site_id": 1,
        "name": "Scuola A",
        "status": "success",
        "found_tenders": 1,
        "message": None,
    }


async def test_no_fetchable_candidates_is_success_with_zero():
    fetcher = FakeFetcher()

    result = await make_scanner(fetcher).scan_one(Site(2, "Scuola B", "http://scuola-b.it"))

    assert result.status is ScanStatus.SUCCESS
    assert result.found_tenders == 0


async def test_timeout_does_not_block_other_candidates(albo_page):
    fetcher = FakeFetcher(
        pages={"http://scuola-c.it/gare": albo_page},
        timeouts={"https://scuola-c.it", "https://scuola-c.it/albo-pretorio"},
        delay=0.05,
    )

    result = await make_scanner(fetcher).scan_one(Site(3, "Scuola C", "scuola-c.it"))

    assert result.status is ScanStatus.SUCCESS
    assert result.found_tenders == 1
    assert set(fetcher.calls) >= {"https://scuola-c.it", "http://scuola-c.it/gare"}


async def test_invalid_website_url_makes_no_request():
    fetcher = FakeFetcher()

    result = await make_scanner(fetcher).scan_one(Site(4, "Scuola D", "http://[::1"))

    assert result.status is ScanStatus.ERROR
    assert result.message == "invalid website URL"
    assert fetcher.calls == []


async def test_missing_website_is_error_alone_and_skipped_in_batch():
    fetcher = FakeFetcher()
    scanner = make_scanner(fetcher)
    site = Site(5, "Scuola E", None)

    single = await scanner.scan_one(site)
    batch = await scanner.scan_batch([site, Site(6, "Scuola F", "  ")])

    assert single.status is ScanStatus.ERROR
    assert [r.status for r in batch] == [ScanStatus.SKIPPED, ScanStatus.SKIPPED]
    assert fetcher.calls == []


async def test_site_without_id_is_error():
    result = await make_scanner(FakeFetcher()).scan_one(Site(None, "Senza id", "scuola.it"))

    assert result.status is ScanStatus.ERROR


async def test_batch_isolates_crashing_site(albo_page):
    fetcher = FakeFetcher(
        pages={
            "https://uno.it/albo-pretorio": albo_page,
            "https://tre.it/gare": albo_page,
        },
        crash_hosts={"due.it"},
    )
    sites = [Site(1, "Uno", "uno.it"), Site(2, "Due", "due.it"), Site(3, "Tre", "tre.it")]

    results = await make_scanner(fetcher).scan_batch(sites)

    assert [r.site_id for r in results] == [1, 2, 3]
    assert [r.status for r in results] == [ScanStatus.SUCCESS, ScanStatus.ERROR, ScanStatus.SUCCESS]
    assert [r.found_tenders for r in results] == [1, 0, 1]
    assert results[1].message == "parser exploded"


async def test_iter_scan_batch_yields_every_site(albo_page):
    fetcher = FakeFetcher(pages={"https://uno.it/albo-pretorio": albo_page})
    sites = [Site(1, "Uno", "uno.it"), Site(2, "Due", "due.it"), Site(3, "Senza sito", "")]

    results = [result async for result in make_scanner(fetcher).iter_scan_batch(sites)]

    assert sorted(r.site_id for r in results) == [1, 2, 3]
    by_id = {r.site_id: r for r in results}
    assert by_id[1].found_tenders == 1
    assert by_id[3].status is ScanStatus.SKIPPED


async def test_worker_pool_bounds_concurrency():
    running = 0
    peak = 0

    async def work(item):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        if item == 3:
            raise ValueError("bad item")
        return item * 2

    results = await WorkerPool(2).map(work, range(6))

    assert peak == 2
    assert results[:3] == [0, 2, 4]
    assert isinstance(results[3], ValueError)
    assert results[4:] == [8, 10]


async def test_scan_site_ids_end_to_end(engine, school_id, albo_page):
    def handler(request):
        if request.url.scheme == "https" and request.url.path == "/albo-pretorio":
            return httpx.Response(200, text=albo_page)
        return httpx.Response(404)

    backend = HttpBackend(transport=httpx.MockTransport(handler))
    config = AppConfig()

    results = await scan_site_ids([school_id, 424242], config, engine=engine, backend=backend)

    assert len(results) == 1
    assert results[0].status is ScanStatus.SUCCESS
    assert results[0].found_tenders == 1

    async with session_scope(create_session_factory(engine)) as session:
        tenders = list((await session.execute(select(Tender))).scalars())

    assert len(tenders) == 1
    assert tenders[0].site_id == school_id
    assert tenders[0].url == "https://www.icmanzoni.edu.it/bando1.pdf"
    assert tenders[0].type == "Avviso"

    # rescanning updates in place
    backend = HttpBackend(transport=httpx.MockTransport(handler))
    await scan_site_ids([school_id], config, engine=engine, backend=backend)

    async with session_scope(create_session_factory(engine)) as session:
        assert len(list((await session.execute(select(Tender))).scalars())) == 1


async def test_scan_site_ids_applies_logging_config(engine, tmp_path, monkeypatch):
    log_file = tmp_path / "logs" / "scan.log"
    config = AppConfig(logging=LoggingConfig(level="WARNING", file=log_file, rich_console=False))
    monkeypatch.setattr(runner, "load_app_config", lambda: config)

    backend = HttpBackend(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
    root = logging.getLogger("schooltenders")
    try:
        results = await scan_site_ids([], engine=engine, backend=backend)

        assert results == []
        assert root.level == logging.WARNING
        assert any(
            getattr(handler, "baseFilename", None) == str(log_file) for handler in root.handlers
        )
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)
