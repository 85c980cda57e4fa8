# src/screener_api/infrastructure/resilience/retry.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Retry utilities (async) with jittered exponential backoff."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry attempts."""

    total: int  # retries after the first attempt
    base: float  # base backoff seconds
    cap: float  # max backoff seconds
    jitter: bool = True  # full jitter

    def backoff(self, attempt: int) -> float:
        """Sleep before retry number ``attempt + 1``."""
        delay = min(self.cap, self.base * (2**attempt))
        if self.jitter:
            delay = random.uniform(0, delay)  # noqa: S311
        return delay


async def retry_async[T](
    fn: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    retry_on: Callable[[Exception], bool],
) -> T:
    """Run ``fn`` until it succeeds or the retry budget is spent.

    Args:
        fn: Zero-arg async function to execute.
        policy: Retry count and backoff shape.
        retry_on: Returns True for exceptions worth another attempt.

    Returns:
        The first successful result of ``fn``.

    Raises:
        The last exception when retries are exhausted or it is not retryable.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:  # noqa: BLE001
            if attempt >= policy.total or not retry_on(exc):
                raise
        await asyncio.sleep(policy.backoff(attempt))
        attempt += 1


__all__ = ["RetryPolicy", "retry_async"]
