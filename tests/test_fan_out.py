from __future__ import annotations

import asyncio

import pytest

from core.errors import FanOutError
from core.fan_out import collect_all, every


class InFlightCounter:
    def __init__(self) -> None:
        self.current = 0
        self.peak = 0
        self.started: list[int] = []

    async def track(self, item: int) -> None:
        self.started.append(item)
        self.current += 1
        self.peak = max(self.peak, self.current)
        # Yield a few times so other workers get a chance to start.
        for _ in range(3):
            await asyncio.sleep(0)
        self.current -= 1


def test_collect_all_returns_results_in_input_order() -> None:
    async def double(item: int) -> int:
        await asyncio.sleep(0.001 * (5 - item))
        return item * 2

    assert asyncio.run(collect_all([1, 2, 3, 4], double, limit=5)) == [2, 4, 6, 8]


def test_collect_all_respects_concurrency_limit() -> None:
    counter = InFlightCounter()

    async def worker(item: int) -> int:
        await counter.track(item)
        return item

    asyncio.run(collect_all(list(range(12)), worker, limit=3))
    assert counter.peak == 3


def test_collect_all_runs_every_item_then_raises_first_error() -> None:
    finished: list[int] = []

    async def worker(item: int) -> int:
        await asyncio.sleep(0)
        if item == 1:
            raise RuntimeError("boom")
        finished.append(item)
        return item

    with pytest.raises(FanOutError) as excinfo:
        asyncio.run(collect_all([0, 1, 2, 3], worker, limit=2))

    assert isinstance(excinfo.value.cause, RuntimeError)
    assert sorted(finished) == [0, 2, 3]


def test_collect_all_empty_input() -> None:
    async def worker(item: int) -> int:
        return item

    assert asyncio.run(collect_all([], worker, limit=5)) == []


def test_collect_all_rejects_zero_limit() -> None:
    async def worker(item: int) -> int:
        return item

    with pytest.raises(ValueError):
        asyncio.run(collect_all([1], worker, limit=0))


def test_every_true_when_all_pass() -> None:
    async def predicate(item: int) -> bool:
        return True

    assert asyncio.run(every([1, 2, 3], predicate, limit=2)) is True


def test_every_vacuously_true_for_no_items() -> None:
    async def predicate(item: int) -> bool:
        return False

    assert asyncio.run(every([], predicate, limit=1)) is True


def test_every_serialized_stops_scheduling_after_false() -> None:
    called: list[int] = []

    async def predicate(item: int) -> bool:
        called.append(item)
        return item != 2

    assert asyncio.run(every([1, 2, 3, 4], predicate, limit=1)) is False
    assert called == [1, 2]


def test_every_limit_bounds_extra_in_flight_work() -> None:
    called: list[int] = []

    async def predicate(item: int) -> bool:
        called.append(item)
        await asyncio.sleep(0)
        return item != 0

    assert asyncio.run(every(list(range(10)), predicate, limit=2)) is False
    # At most limit - 1 items beyond the failing one may have started.
    assert len(called) <= 2


def test_every_respects_concurrency_limit() -> None:
    counter = InFlightCounter()

    async def predicate(item: int) -> bool:
        await counter.track(item)
        return True

    assert asyncio.run(every(list(range(8)), predicate, limit=2)) is True
    assert counter.peak == 2
    assert counter.started == list(range(8))


def test_every_propagates_exceptions_instead_of_false() -> None:
    async def predicate(item: int) -> bool:
        raise KeyError(item)

    with pytest.raises(KeyError):
        asyncio.run(every([1, 2], predicate, limit=1))
