"""Retry policy with exponential backoff.

Backoff strategy:
  delay = min(base * 2^attempt, max_delay)

Transient failures are retried until max_attempts calls have been made;
permanent failures leave the loop on the first occurrence.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from llm_fingerprint.gateway.client import PermanentModelError, TransientModelError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt cap and backoff parameters for a single query."""

    max_attempts: int = 3  # Total calls, including the first
    base_delay: float = 1.0  # Seconds before the first retry
    max_delay: float = 30.0  # Cap on retry delay

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retrying after the given (0-based) failed attempt."""
        return min(self.base_delay * (2**attempt), self.max_delay)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    sleep: SleepFunc = asyncio.sleep,
    label: str = "",
    on_retry: Callable[[int, TransientModelError], None] | None = None,
) -> T:
    """Run *operation*, retrying transient failures with exponential backoff.

    Raises:
        PermanentModelError: immediately, without retrying.
        TransientModelError: the last error once all attempts are exhausted.
    """
    last_error: TransientModelError | None = None

    for attempt in range(policy.max_attempts):
        try:
            return await operation()
        except PermanentModelError:
            raise
        except TransientModelError as e:
            last_error = e
            if attempt + 1 >= policy.max_attempts:
                break

            delay = policy.backoff_delay(attempt)
            logger.warning(
                "Transient failure for %s (attempt %d/%d): %s; retrying in %.1fs",
                label or "query",
                attempt + 1,
                policy.max_attempts,
                e,
                delay,
            )
            if on_retry is not None:
                on_retry(attempt, e)
            await sleep(delay)

    if last_error is None:
        raise TransientModelError(f"Retry policy for {label or 'query'} allows no attempts")
    raise last_error
