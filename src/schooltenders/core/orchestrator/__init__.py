"""Orchestrator - site scanning, bounded concurrency, batch results."""

from .pool import WorkerPool
from .runner import ScanResult, ScanStatus, TenderScanner, scan_site_ids, summarize_batch

__all__ = [
    "WorkerPool",
    "ScanResult",
    "ScanStatus",
    "TenderScanner",
    "scan_site_ids",
    "summarize_batch",
]
