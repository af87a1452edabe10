from __future__ import annotations

import asyncio

import pytest

from ravensync.limiter import ConcurrencyLimiter, process_with_concurrency


class _Tracker:
    def __init__(self) -> None:
        self.active = 0
        self.peak = 0
        self.started: list[int] = []

    async def work(self, item: int, delay: float = 0.001) -> int:
        self.started.append(item)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(delay)
        finally:
            self.active -= 1
        return item * 10


@pytest.mark.asyncio
@pytest.mark.parametrize(("count", "limit"), [(0, 1), (1, 1), (7, 1), (10, 3), (10, 5), (4, 10), (25, 4)])
async def test_never_exceeds_limit(count: int, limit: int) -> None:
    tracker = _Tracker()

    results = await process_with_concurrency(list(range(count)), tracker.work, limit)

    assert results == [i * 10 for i in range(count)]
    assert tracker.peak <= limit
    if count:
        assert tracker.peak == min(count, limit)


@pytest.mark.asyncio
async def test_results_follow_input_order_not_completion_order() -> None:
    items = [5, 4, 3, 2, 1]

    async def _worker(item: int) -> str:
        # Earlier items finish last.
        await asyncio.sleep(item * 0.002)
        return f"item-{item}"

    results = await ConcurrencyLimiter(5).run(items, _worker)

    assert results == ["item-5", "item-4", "item-3", "item-2", "item-1"]


@pytest.mark.asyncio
async def test_empty_input_invokes_nothing() -> None:
    calls: list[int] = []

    async def _worker(item: int) -> int:
        calls.append(item)
        return item

    assert await ConcurrencyLimiter(3).run([], _worker) == []
    assert calls == []


@pytest.mark.asyncio
async def test_limit_one_is_strictly_sequential() -> None:
    tracker = _Tracker()

    await ConcurrencyLimiter(1).run([3, 1, 2], tracker.work)

    assert tracker.started == [3, 1, 2]
    assert tracker.peak == 1


@pytest.mark.asyncio
async def test_first_failure_stops_new_items_and_lets_in_flight_settle() -> None:
    started: list[int] = []
    finished: list[int] = []

    async def _worker(item: int) -> int:
        started.append(item)
        if item == 2:
            await asyncio.sleep(0.001)
            raise RuntimeError("boom on 2")
        await asyncio.sleep(0.005)
        finished.append(item)
        return item

    with pytest.raises(RuntimeError, match="boom on 2"):
        await ConcurrencyLimiter(3).run(list(range(10)), _worker)

    assert sorted(started) == [0, 1, 2]
    # Items 0 and 1 were already running and completed.
    assert sorted(finished) == [0, 1]


@pytest.mark.asyncio
async def test_reports_first_observed_failure() -> None:
    async def _worker(item: int) -> int:
        await asyncio.sleep(0.001 * (3 - item))
        raise ValueError(f"fail {item}")

    with pytest.raises(ValueError, match="fail 2"):
        await ConcurrencyLimiter(3).run([0, 1, 2], _worker)


def test_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        ConcurrencyLimiter(0)
