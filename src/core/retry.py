#!/usr/bin/env python3
"""
Retry with exponential backoff for async operations.

Retry strategy:
1. First failure: retry immediately once (if retry_immediately_once is set)
2. Subsequent failures: wait with exponential backoff, up to max_retries

With the defaults:
- Attempt 1: execute immediately
- Attempt 2: retry immediately (no delay)
- Attempt 3: wait 1000ms, then retry
- Attempt 4: wait 2000ms, then retry
- Attempt 5: wait 4000ms, then retry
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .exceptions import HttpStatusError, LLMError, NetworkError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Substrings that mark an unclassified exception as a transient network failure
TRANSIENT_ERROR_MARKERS = (
    'ECONNRESET',
    'ETIMEDOUT',
    'ENOTFOUND',
    'EAI_AGAIN',
    'fetch failed',
    'Connection reset',
    'timed out',
    'Temporary failure in name resolution',
)


def _always_retry(error: BaseException) -> bool:
    return True


@dataclass
class RetryPolicy:
    """Retry configuration, scoped to a single call."""
    max_retries: int = 3
    initial_delay_ms: float = 1000
    backoff_multiplier: float = 2
    max_delay_ms: float = 10000
    retry_immediately_once: bool = True
    should_retry: Callable[[BaseException], bool] = field(default=_always_retry)

    @property
    def total_attempts(self) -> int:
        """Initial attempt + optional immediate retry + backoff retries."""
        return 1 + (1 if self.retry_immediately_once else 0) + self.max_retries

    def backoff_delay_ms(self, exponential_attempt: int) -> float:
        """Delay before the Nth backoff retry (0-based); the immediate retry is not counted."""
        return min(
            self.initial_delay_ms * (self.backoff_multiplier ** exponential_attempt),
            self.max_delay_ms
        )


async def with_retry(operation: Callable[[], Awaitable[T]],
                     policy: Optional[RetryPolicy] = None,
                     label: Optional[str] = None,
                     sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep) -> T:
    """
    Execute an async operation with retries and exponential backoff.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Retry configuration (defaults to RetryPolicy())
        label: Context string for log lines
        sleep: Coroutine used to wait between attempts, in seconds

    Returns:
        The result of the first successful attempt

    Raises:
        The last error, once attempts are exhausted or the policy's predicate
        rejects it
    """
    policy = policy or RetryPolicy()
    label = label or 'Operation'
    total_attempts = policy.total_attempts
    immediate_retry_used = False

    for attempt in range(1, total_attempts + 1):
        try:
            result = await operation()
        except Exception as error:
            if not policy.should_retry(error):
                logger.warning(f"{label} failed with non-retryable error: {error}")
                raise

            if attempt >= total_attempts:
                logger.error(f"{label} failed after {attempt} attempts: {error}")
                raise

            if policy.retry_immediately_once and not immediate_retry_used:
                immediate_retry_used = True
                logger.warning(f"{label} failed on attempt {attempt}, retrying immediately: {error}")
                continue

            exponential_attempt = attempt - (2 if policy.retry_immediately_once else 1)
            delay_ms = policy.backoff_delay_ms(exponential_attempt)
            logger.warning(f"{label} failed on attempt {attempt}, retrying in {delay_ms:.0f}ms: {error}")
            if delay_ms > 0:
                await sleep(delay_ms / 1000)
            continue

        if attempt > 1:
            logger.info(f"{label} succeeded on attempt {attempt}")
        return result

    # Unreachable: the loop either returns or re-raises
    raise RuntimeError(f"{label} exhausted retries without a result")


def is_retryable_http_error(error: BaseException) -> bool:
    """
    Decide whether an HTTP-ish failure is worth retrying.

    Retries on:
    - 5xx server errors and 429 rate limiting
    - transient network failures (timeouts, resets, DNS hiccups)

    Does NOT retry on other 4xx client errors; those indicate an invalid
    request and will fail the same way again.
    """
    if isinstance(error, HttpStatusError):
        return error.is_transient
    if isinstance(error, NetworkError):
        return error.is_transient
    if isinstance(error, LLMError):
        return error.is_transient

    message = str(error)
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)
