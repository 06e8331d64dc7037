"""
Retry policy tests.

Guards against:
1. Transient AI failures (503 / overloaded / 429 / timeout) surfacing on the first attempt
2. Permanent failures being retried
3. Backoff drifting from initial_delay * 2^attempt + jitter
"""
import asyncio

import pytest

from sensai.utils import retry as retry_module
from sensai.utils.retry import calculate_backoff, is_retryable_error, with_retry


def _run(coro):
    """Run an async coroutine in a sync test."""
    return asyncio.run(coro)


class _Flaky:
    def __init__(self, *errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class _Sleeps:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("message", [
    "503 Service Unavailable",
    "Model is OVERLOADED, try later",
    "Error 429: rate limit",
    "Request Timeout",
    "SERVICE UNAVAILABLE",
])
def test_transient_messages_are_retryable(message):
    assert is_retryable_error(Exception(message))


@pytest.mark.parametrize("message", ["Invalid API key", "400 Bad Request", ""])
def test_other_messages_are_not_retryable(message):
    assert not is_retryable_error(Exception(message))


# ---------------------------------------------------------------------------
# Backoff
# ---------------------------------------------------------------------------

def test_backoff_doubles_per_attempt_without_jitter():
    assert calculate_backoff(0, initial_delay=1.0, max_jitter=0) == 1.0
    assert calculate_backoff(1, initial_delay=1.0, max_jitter=0) == 2.0
    assert calculate_backoff(3, initial_delay=0.5, max_jitter=0) == 4.0


def test_backoff_jitter_is_bounded(monkeypatch):
    monkeypatch.setattr(retry_module.random, "uniform", lambda low, high: high)
    assert calculate_backoff(2, initial_delay=1.0, max_jitter=1.2) == pytest.approx(5.2)


# ---------------------------------------------------------------------------
# with_retry
# ---------------------------------------------------------------------------

def test_succeeds_after_two_transient_failures():
    op = _Flaky(Exception("503 Service Unavailable"), Exception("model overloaded"))
    sleeps = _Sleeps()

    result = _run(with_retry(op, max_attempts=5, initial_delay=1.0, max_jitter=0, sleep=sleeps))

    assert result == "ok"
    assert op.calls == 3
    assert sleeps.delays == [1.0, 2.0]


def test_permanent_failure_is_not_retried():
    op = _Flaky(ValueError("Invalid API key"))
    sleeps = _Sleeps()

    with pytest.raises(ValueError, match="Invalid API key"):
        _run(with_retry(op, max_attempts=5, sleep=sleeps))

    assert op.calls == 1
    assert sleeps.delays == []


def test_final_attempt_error_propagates_unchanged():
    errors = [RuntimeError(f"429 attempt {i}") for i in range(3)]
    op = _Flaky(*errors)
    sleeps = _Sleeps()

    with pytest.raises(RuntimeError, match="429 attempt 2"):
        _run(with_retry(op, max_attempts=3, initial_delay=0.1, max_jitter=0, sleep=sleeps))

    assert op.calls == 3
    assert len(sleeps.delays) == 2


def test_single_attempt_never_sleeps():
    op = _Flaky(Exception("timeout"))
    sleeps = _Sleeps()

    with pytest.raises(Exception, match="timeout"):
        _run(with_retry(op, max_attempts=1, sleep=sleeps))

    assert sleeps.delays == []
