"""
Bounded-concurrency worker pool.

Runs one coroutine per item with at most ``limit`` in flight. Failures are
returned in place of results so one item never cancels its siblings.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Iterable, TypeVar


T = TypeVar("T")
R = TypeVar("R")


class WorkerPool:
    """Semaphore-bounded fan-out over a collection of items."""

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError(f"Worker pool limit must be positive, got {limit}")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)

    async def _run(self, func: Callable[[T], Awaitable[R]], item: T) -> R:
        async with self._semaphore:
            return await func(item)

    async def map(
        self,
        func: Callable[[T], Awaitable[R]],
        items: Iterable[T],
    ) -> list[R | BaseException]:
        """Run ``func`` over ``items``; results keep input order."""
        return await asyncio.gather(
            *(self._run(func, item) for item in items),
            return_exceptions=True,
        )

    async def as_completed(
        self,
        func: Callable[[T], Awaitable[R]],
        items: Iterable[T],
    ) -> AsyncIterator[R | Exception]:
        """Run ``func`` over ``items``, yielding results as they finish."""
        tasks = [asyncio.ensure_future(self._run(func, item)) for item in items]
        try:
            for future in asyncio.as_completed(tasks):
                try:
                    yield await future
                except Exception as e:
                    yield e
        finally:
            # Consumer stopped early
            for task in tasks:
                task.cancel()
