"""Bounded-concurrency mapping over a sequence of inputs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ConcurrencyLimiter(Generic[T, R]):
    """Run an async worker over many items with at most ``limit`` in flight.

    ``limit`` workers pull the next unstarted index from a shared cursor,
    so results land at their input index whatever order they complete in.
    After the first failure no further items are started; invocations
    already running are allowed to settle, then that first error is raised.

    Usage::

        limiter = ConcurrencyLimiter(5)
        details = await limiter.run(summaries, fetch_details)
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self._limit = limit

    @property
    def limit(self) -> int:
        return self._limit

    async def run(self, items: Sequence[T], worker: Callable[[T], Awaitable[R]]) -> list[R]:
        """Apply *worker* to every item, preserving input order in the result."""
        if not items:
            return []

        results: list[R | None] = [None] * len(items)
        cursor = 0
        first_error: BaseException | None = None

        async def _drain() -> None:
            nonlocal cursor, first_error
            while first_error is None and cursor < len(items):
                index = cursor
                cursor += 1
                try:
                    results[index] = await worker(items[index])
                except Exception as exc:
                    _logger.debug("Worker failed on item %d", index, exc_info=True)
                    if first_error is None:
                        first_error = exc
                    return

        await asyncio.gather(*(_drain() for _ in range(min(self._limit, len(items)))))

        if first_error is not None:
            raise first_error
        return results  # type: ignore[return-value]


async def process_with_concurrency(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[R]:
    """Shorthand for ``ConcurrencyLimiter(limit).run(items, worker)``."""
    return await ConcurrencyLimiter(limit).run(items, worker)
