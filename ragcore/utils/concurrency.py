"""Shared concurrency primitives for bounded fan-out.

Two patterns are exposed:

1. **throttled_gather** -- ``asyncio.gather`` with each awaitable wrapped in a
   semaphore acquire/release.  Used when a flat list of coroutines must run
   with a ceiling on how many are in flight.

2. **grouped** -- splits a sequence into fixed-size groups.  The batch job
   coordinator runs one group at a time (all members concurrently) and
   pauses between groups so embedding calls and open file handles stay
   bounded.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from typing import TypeVar

_T = TypeVar("_T")


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, at most ``semaphore`` slots at a time.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Semaphore bounding how many awaitables execute simultaneously.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


def grouped(items: Sequence[_T], size: int) -> list[list[_T]]:
    """Split *items* into consecutive groups of at most *size* elements.

    >>> grouped([1, 2, 3, 4, 5], 2)
    [[1, 2], [3, 4], [5]]
    """
    if size <= 0:
        raise ValueError(f"group size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]
