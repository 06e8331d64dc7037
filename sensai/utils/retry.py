"""
Retry utilities with jittered exponential backoff for AI calls.

Generative-AI backends surface transient failures (rate limits, overload,
timeouts) only through their error messages, so retryability is decided by
matching a fixed token set against the message text.
"""
import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar
from sensai.utils.logger import log

T = TypeVar("T")

RETRYABLE_TOKENS: Tuple[str, ...] = (
    "503",
    "overloaded",
    "429",
    "timeout",
    "service unavailable",
)


@dataclass
class RetryStats:
    """Tracks retry statistics for a single operation."""
    attempts: int = 0
    total_delay_seconds: float = 0.0
    last_error: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    success: bool = False

    def record_attempt(self, error: Optional[Exception] = None, delay: float = 0.0):
        """Record a retry attempt."""
        self.attempts += 1
        self.total_delay_seconds += delay
        if error:
            error_str = f"{type(error).__name__}: {str(error)}"
            self.last_error = error_str
            self.errors.append(error_str)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "attempts": self.attempts,
            "total_delay_seconds": round(self.total_delay_seconds, 2),
            "success": self.success,
            "last_error": self.last_error,
            "errors": self.errors[:5]  # Cap at 5 errors
        }


def calculate_backoff(attempt: int, initial_delay: float = 1.0, max_jitter: float = 1.0) -> float:
    """
    Calculate delay before the next attempt.

    Args:
        attempt: Index of the attempt that just failed (0-indexed)
        initial_delay: Base delay in seconds
        max_jitter: Upper bound of the uniform random jitter in seconds

    Returns:
        Delay in seconds: initial_delay * 2^attempt + uniform(0, max_jitter)
    """
    return initial_delay * (2 ** attempt) + random.uniform(0, max_jitter)


def is_retryable_error(error: Exception) -> bool:
    """True if the error message carries one of the transient-failure tokens."""
    error_str = str(error).lower()
    return any(token in error_str for token in RETRYABLE_TOKENS)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 5,
    initial_delay: float = 1.0,
    max_jitter: float = 1.0,
    label: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run an async operation, retrying transient failures with backoff.

    Non-retryable errors and the error of the final attempt propagate
    unchanged. Attempts are sequential; the only suspension between them
    is the backoff wait.

    Usage:
        result = await with_retry(lambda: model.generate(prompt), max_attempts=5)
    """
    stats = RetryStats()

    for attempt in range(max_attempts):
        try:
            result = await operation()
            stats.record_attempt()
            stats.success = True

            if attempt > 0:
                log.info(
                    f"{label} succeeded on attempt {attempt + 1} "
                    f"after {stats.total_delay_seconds:.1f}s total delay"
                )

            return result

        except Exception as e:
            if attempt >= max_attempts - 1 or not is_retryable_error(e):
                stats.record_attempt(error=e)
                log.error(f"{label} failed after {attempt + 1} attempts: {e} ({stats.to_dict()})")
                raise

            delay = calculate_backoff(attempt, initial_delay=initial_delay, max_jitter=max_jitter)
            stats.record_attempt(error=e, delay=delay)

            log.warning(
                f"{label} attempt {attempt + 1} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )

            await sleep(delay)

    raise RuntimeError(f"{label}: max_attempts must be at least 1")
