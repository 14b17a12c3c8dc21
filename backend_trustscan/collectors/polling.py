"""
Bounded poll-with-timeout for vendors that analyse asynchronously.

Each attempt awaits asyncio.sleep between fetches, so waiting never blocks
other collectors running on the same loop.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    is_ready: Callable[[T], bool],
    *,
    attempts: int,
    interval_sec: float,
    budget_sec: float | None = None,
    initial_delay_sec: float = 0.0,
) -> T | None:
    """
    Call fetch() until is_ready(result) or the attempt count / wall-clock budget runs out.

    Returns the first ready result, or None when nothing became ready in time.
    Exceptions from fetch() propagate to the caller.
    """
    attempts = max(1, attempts)
    deadline = None if budget_sec is None else time.monotonic() + budget_sec
    if initial_delay_sec > 0:
        await asyncio.sleep(initial_delay_sec)
    for attempt in range(attempts):
        result = await fetch()
        if is_ready(result):
            return result
        if attempt == attempts - 1:
            break
        if deadline is not None and time.monotonic() + interval_sec > deadline:
            break
        await asyncio.sleep(interval_sec)
    return None
