"""
Response timing normalization.

Every wrapped handler takes at least a fixed minimum duration from entry to
response, whichever branch it leaves through, so latency does not reveal
which check failed.
"""

import asyncio
import functools
import time
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

DEFAULT_FLOOR_MS = 200


async def ensure_minimum_duration(start_time: float, floor_ms: float = DEFAULT_FLOOR_MS) -> None:
    """
    Suspend until at least floor_ms has elapsed since start_time.

    Args:
        start_time: Value of time.monotonic() taken at handler entry
        floor_ms: Minimum duration in milliseconds
    """
    elapsed = time.monotonic() - start_time
    remaining = floor_ms / 1000 - elapsed
    if remaining > 0:
        await asyncio.sleep(remaining)


def minimum_duration(
    floor_ms: Optional[float] = None,
    floor_provider: Optional[Callable[[], float]] = None
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorate an async handler so that all of its exits respect the floor.

    The floor also applies when the handler raises; the exception is
    re-raised once the floor has elapsed.

    Args:
        floor_ms: Fixed floor in milliseconds
        floor_provider: Callable returning the floor, read on each call
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            start_time = time.monotonic()
            try:
                return await func(*args, **kwargs)
            finally:
                if floor_provider is not None:
                    floor = floor_provider()
                elif floor_ms is not None:
                    floor = floor_ms
                else:
                    floor = DEFAULT_FLOOR_MS
                await ensure_minimum_duration(start_time, floor)

        return wrapper

    return decorator
