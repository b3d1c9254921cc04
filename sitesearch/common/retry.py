"""Exponential backoff for transient failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def is_retryable(exc: BaseException) -> bool:
    """Timeouts and errors flagged ``retryable`` are worth another attempt."""
    return isinstance(exc, TimeoutError) or bool(getattr(exc, "retryable", False))


@dataclass(frozen=True)
class RetryPolicy:
    """Retry schedule: ``min(base * 2**attempt, cap)`` between attempts."""

    max_retries: int = 3
    base_delay_s: float = 1.0
    max_delay_s: float = 30.0

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1`` (attempt counts from 0)."""
        return min(self.base_delay_s * (2**attempt), self.max_delay_s)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    description: str = "operation",
    should_retry: Callable[[BaseException], bool] = is_retryable,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the policy is exhausted.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt.
        policy: Backoff schedule.
        description: Label used in log messages.
        should_retry: Predicate deciding whether a failure is transient.
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        The operation's result.

    Raises:
        The last exception raised by ``operation`` once retries are exhausted
        or the failure is not retryable.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= policy.max_retries or not should_retry(e):
                raise
            wait_time = policy.delay_for(attempt)
            logger.warning(
                "%s failed (%s), retrying in %.1fs (attempt %d/%d)",
                description,
                type(e).__name__,
                wait_time,
                attempt + 1,
                policy.max_retries,
            )
            await sleep(wait_time)
            attempt += 1
