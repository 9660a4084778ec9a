"""
Bounded retry policy for chat turns.

A turn is attempted at most ``max_attempts`` times with a fixed backoff
between attempts. Only transport failures are retried; decode errors and
everything else surface on the first occurrence.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from term_ai.errors import DecodeError, TransportError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry policy.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1)
        backoff_ms: Fixed delay between attempts in milliseconds
    """

    max_attempts: int = 3
    backoff_ms: int = 1000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_ms < 0:
            raise ValueError("backoff_ms must not be negative")

    @classmethod
    def no_retry(cls) -> RetryConfig:
        """Create a config that disables retries."""
        return cls(max_attempts=1, backoff_ms=0)


@dataclass
class RetryResult:
    """Result of a retry operation.

    Attributes:
        success: Whether the operation succeeded
        value: The result value (if success)
        error: The last error (if failed)
        attempts: Number of attempts made
        total_delay_ms: Total delay from retries in milliseconds
    """

    success: bool
    value: Any = None
    error: Exception | None = None
    attempts: int = 0
    total_delay_ms: float = 0.0

    def unwrap(self) -> Any:
        """Return the value, or raise the last error."""
        if self.success:
            return self.value
        assert self.error is not None
        raise self.error


class RetryPolicy:
    """Explicit bounded retry loop with a fixed backoff.

    Example:
        >>> policy = RetryPolicy(RetryConfig(max_attempts=3, backoff_ms=1000))
        >>> result = await policy.execute(send_once)
        >>> if not result.success:
        ...     print(f"Failed after {result.attempts} attempts")
    """

    def __init__(self, config: RetryConfig | None = None) -> None:
        self._config = config or RetryConfig()

    @property
    def config(self) -> RetryConfig:
        return self._config

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds before the attempt following ``attempt`` (1-based)."""
        return self._config.backoff_ms / 1000.0

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Check if an error should trigger another attempt.

        Args:
            error: The exception that occurred
            attempt: Attempts made so far (1-based)

        Returns:
            True if another attempt is allowed
        """
        if attempt >= self._config.max_attempts:
            return False
        if isinstance(error, DecodeError):
            return False
        return isinstance(error, TransportError)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: Callable[[int, Exception, float], None] | None = None,
    ) -> RetryResult:
        """Execute an operation with retry.

        Args:
            operation: Async operation; called once per attempt
            on_retry: Optional callback ``(attempt, error, delay)`` invoked
                before sleeping ahead of the next attempt

        Returns:
            RetryResult with success status and value/error
        """
        total_delay = 0.0

        for attempt in range(1, self._config.max_attempts + 1):
            try:
                value = await operation()
            except Exception as e:
                if not self.should_retry(e, attempt):
                    return RetryResult(
                        success=False,
                        error=e,
                        attempts=attempt,
                        total_delay_ms=total_delay * 1000,
                    )

                delay = self.calculate_delay(attempt)
                total_delay += delay

                if on_retry:
                    on_retry(attempt, e, delay)

                if delay > 0:
                    await asyncio.sleep(delay)
            else:
                return RetryResult(
                    success=True,
                    value=value,
                    attempts=attempt,
                    total_delay_ms=total_delay * 1000,
                )

        # should_retry refuses once max_attempts is reached
        raise AssertionError("retry loop exited without a result")

