"""Bounded concurrent fan-out over independent items.

Two modes with deliberately different outcomes:

- collect_all: every item runs; results come back in input order, or the
  whole call raises FanOutError wrapping the first worker failure once
  all scheduled workers have drained.
- every: a logical AND over boolean predicates. The first False stops new
  work from being scheduled and the call returns False; in-flight workers
  finish and their results are discarded.

Each worker writes only to its own result slot, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from core.errors import FanOutError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValueError(f"Concurrency limit must be at least 1, got {limit}")


async def collect_all(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
) -> List[R]:
    """Run ``worker`` for every item with at most ``limit`` in flight."""

    _check_limit(limit)
    semaphore = asyncio.Semaphore(limit)
    slots: List[Optional[R]] = [None] * len(items)
    first_error: List[BaseException] = []

    async def run(index: int, item: T) -> None:
        async with semaphore:
            try:
                slots[index] = await worker(item)
            except Exception as exc:
                LOGGER.warning("Fan-out worker failed for %r: %s", item, exc)
                if not first_error:
                    first_error.append(exc)

    await asyncio.gather(*(run(index, item) for index, item in enumerate(items)))

    if first_error:
        raise FanOutError(first_error[0]) from first_error[0]
    return slots  # type: ignore[return-value]


async def every(
    items: Sequence[T],
    predicate: Callable[[T], Awaitable[bool]],
    limit: int,
) -> bool:
    """Return True only if ``predicate`` holds for every item.

    Scheduling stops on the first False. Exceptions raised by a predicate
    also stop scheduling but are not turned into False; they propagate
    after in-flight work drains.
    """

    _check_limit(limit)
    semaphore = asyncio.Semaphore(limit)
    failed = asyncio.Event()

    async def run(item: T) -> None:
        try:
            if not await predicate(item):
                failed.set()
        except Exception:
            failed.set()
            raise
        finally:
            semaphore.release()

    tasks: List[asyncio.Task] = []
    for item in items:
        await semaphore.acquire()
        if failed.is_set():
            semaphore.release()
            break
        tasks.append(asyncio.create_task(run(item)))

    outcomes = await asyncio.gather(*tasks, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return not failed.is_set()
