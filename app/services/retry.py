"""
Retry with exponential backoff and jitter.

Generic over the operation: callers pass a zero-argument coroutine factory and
a RetryPolicy describing attempts, delays and which errors are retryable.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from app.core.exceptions import is_overload_error
from app.core.logger import logger

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often and how patiently to retry.

    The delay before retry n (n >= 1) is base_delay * 2**(n - 1) plus a random
    jitter in [0, min(max_jitter, base_delay / 2)]. With that cap the largest
    delay before retry n is still shorter than the smallest before retry n + 1.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_jitter: float = 0.5
    retry_on: Callable[[BaseException], bool] = field(default=is_overload_error)

    def backoff(self, retry_number: int) -> float:
        """Deterministic part of the delay before the given retry."""
        return self.base_delay * (2 ** (retry_number - 1))

    @property
    def jitter_cap(self) -> float:
        return max(0.0, min(self.max_jitter, self.base_delay / 2))


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rand: Callable[[float, float], float] = random.uniform,
    on_retry: Optional[Callable[[int, float, BaseException], None]] = None,
) -> T:
    """
    Run `operation`, retrying retryable failures per `policy`.

    Non-retryable errors are raised straight away. When attempts run out the
    last error is raised unchanged, so callers can still tell what kind of
    failure it was.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if not policy.retry_on(exc) or attempt >= policy.max_attempts:
                raise

            delay = policy.backoff(attempt) + rand(0.0, policy.jitter_cap)
            logger.warning(
                f"Attempt {attempt}/{policy.max_attempts} failed ({exc}); retrying in {delay:.2f}s"
            )
            if on_retry is not None:
                on_retry(attempt, delay, exc)
            await sleep(delay)
            attempt += 1
