import asyncio
import logging

import pytest

from core.exceptions import HttpStatusError, LLMError, NetworkError, NETWORK_PAYLOAD_ERROR, NETWORK_TIMEOUT
from core.retry import RetryPolicy, is_retryable_http_error, with_retry


class RecordingSleep:
    def __init__(self) -> None:
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FlakyOperation:
    def __init__(self, failures: int, error: Exception) -> None:
        self.failures = failures
        self.error = error
        self.attempts = 0

    async def __call__(self):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise self.error
        return "ok"


def run(coroutine):
    return asyncio.run(coroutine)


def test_retryable_error_uses_every_attempt():
    """Test that a persistent transient error is tried 1 + 1 + max_retries times."""
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=10, error=HttpStatusError(503, "https://api.test", "busy"))
    policy = RetryPolicy(should_retry=is_retryable_http_error)

    with pytest.raises(HttpStatusError):
        run(with_retry(operation, policy, "test", sleep=sleep))

    assert operation.attempts == 5
    # Immediate retry first, then exponential backoff
    assert sleep.delays == [1.0, 2.0, 4.0]


def test_non_retryable_error_fails_on_first_attempt():
    """Test that a 4xx other than 429 is not retried."""
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=10, error=HttpStatusError(404, "https://api.test", "missing"))
    policy = RetryPolicy(should_retry=is_retryable_http_error)

    with pytest.raises(HttpStatusError):
        run(with_retry(operation, policy, "test", sleep=sleep))

    assert operation.attempts == 1
    assert sleep.delays == []


def test_immediate_retry_does_not_sleep(caplog):
    """Test recovery on the second attempt with no delay."""
    caplog.set_level(logging.INFO, logger="core.retry")
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=1, error=NetworkError(NETWORK_TIMEOUT, "https://api.test"))

    result = run(with_retry(operation, RetryPolicy(should_retry=is_retryable_http_error), "fetch", sleep=sleep))

    assert result == "ok"
    assert operation.attempts == 2
    assert sleep.delays == []
    assert "fetch succeeded on attempt 2" in caplog.text


def test_backoff_is_capped_at_max_delay():
    """Test that delays never exceed max_delay_ms."""
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=10, error=RuntimeError("boom"))
    policy = RetryPolicy(max_retries=5, initial_delay_ms=1000, backoff_multiplier=10,
                         max_delay_ms=5000, retry_immediately_once=False)

    with pytest.raises(RuntimeError):
        run(with_retry(operation, policy, sleep=sleep))

    assert operation.attempts == 6
    assert sleep.delays == [1.0, 5.0, 5.0, 5.0, 5.0]


def test_without_immediate_retry_first_retry_waits():
    """Test that disabling the immediate retry starts backoff at once."""
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=1, error=RuntimeError("boom"))
    policy = RetryPolicy(retry_immediately_once=False)

    assert run(with_retry(operation, policy, sleep=sleep)) == "ok"
    assert sleep.delays == [1.0]


@pytest.mark.parametrize("error,expected", [
    (HttpStatusError(500, "u"), True),
    (HttpStatusError(503, "u"), True),
    (HttpStatusError(429, "u"), True),
    (HttpStatusError(400, "u"), False),
    (HttpStatusError(401, "u"), False),
    (HttpStatusError(404, "u"), False),
    (NetworkError(NETWORK_TIMEOUT, "u"), True),
    (NetworkError(NETWORK_PAYLOAD_ERROR, "u"), False),
    (LLMError("openai", "gpt-4o-mini", "overloaded", status_code=529), True),
    (LLMError("openai", "gpt-4o-mini", "bad request", status_code=400), False),
    (RuntimeError("read ECONNRESET"), True),
    (RuntimeError("Temporary failure in name resolution"), True),
    (ValueError("invalid literal"), False),
])
def test_is_retryable_http_error(error, expected):
    """Test the HTTP retry predicate."""
    assert is_retryable_http_error(error) is expected


def test_error_serializes_with_context():
    """Test that classified errors expose their context for logging."""
    error = HttpStatusError(429, "https://api.test/v1/news", "slow down")

    assert error.to_dict() == {
        'error_type': 'HttpStatusError',
        'error_code': 'HttpStatusError',
        'message': 'HTTP 429 error: slow down',
        'context': {'status_code': 429, 'url': 'https://api.test/v1/news'},
    }
