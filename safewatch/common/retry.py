"""
Retry utilities for SafeWatch.

This module provides retry and backoff helpers used by the
upstream feed clients.
"""

import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

T = TypeVar('T')


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """
    Retry an async callable with exponential backoff.

    Args:
        func: async callable taking no arguments
        max_retries: number of retries after the first attempt
        base_delay: delay before the first retry (seconds)
        max_delay: upper bound for a single delay (seconds)
        jitter: randomize each delay to 50-100% of its nominal value
        retry_on: exception types that trigger a retry

    Returns:
        The callable's result.

    Raises:
        The exception from the last attempt.
    """
    last_exception = None

    for attempt in range(1, max_retries + 2):  # one try + max_retries
        try:
            return await func()
        except retry_on as e:
            last_exception = e

            if attempt > max_retries:
                break

            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
            if jitter:
                delay = delay * (0.5 + random.random() * 0.5)

            await asyncio.sleep(delay)

    raise last_exception
