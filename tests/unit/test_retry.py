"""Tests for the retry policy."""

from __future__ import annotations

import pytest

from term_ai.errors import DecodeError, RemoteError, TransportError
from term_ai.resilience import RetryConfig, RetryPolicy


class _Flaky:
    """Operation failing ``failures`` times before returning ``value``."""

    def __init__(self, failures: int, error: Exception, value: str = "ok") -> None:
        self.failures = failures
        self.error = error
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_defaults(self) -> None:
        """Test three attempts one second apart."""
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.backoff_ms == 1000

    def test_no_retry(self) -> None:
        """Test the no-retry configuration makes a single attempt."""
        assert RetryConfig.no_retry().max_attempts == 1

    @pytest.mark.parametrize(
        "kwargs", [{"max_attempts": 0}, {"backoff_ms": -1}]
    )
    def test_invalid(self, kwargs: dict[str, int]) -> None:
        """Test invalid values are rejected."""
        with pytest.raises(ValueError):
            RetryConfig(**kwargs)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_fixed_delay(self) -> None:
        """Test the backoff does not grow with attempts."""
        policy = RetryPolicy(RetryConfig(backoff_ms=1500))
        assert policy.calculate_delay(1) == 1.5
        assert policy.calculate_delay(2) == 1.5

    def test_should_retry(self) -> None:
        """Test only transport errors are retried while attempts remain."""
        policy = RetryPolicy()
        assert policy.should_retry(TransportError("boom"), 1)
        assert policy.should_retry(RemoteError("HTTP 500", status_code=500), 2)
        assert not policy.should_retry(TransportError("boom"), 3)
        assert not policy.should_retry(DecodeError("bad"), 1)
        assert not policy.should_retry(ValueError("x"), 1)

    @pytest.mark.asyncio
    async def test_success_after_failures(self) -> None:
        """Test two transient failures followed by a success."""
        operation = _Flaky(2, TransportError("dropped"))
        retries: list[tuple[int, float]] = []

        result = await RetryPolicy(RetryConfig(backoff_ms=0)).execute(
            operation, lambda attempt, error, delay: retries.append((attempt, delay))
        )

        assert result.success
        assert result.value == "ok"
        assert result.attempts == 3
        assert operation.calls == 3
        assert retries == [(1, 0.0), (2, 0.0)]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self) -> None:
        """Test the last error is reported once attempts run out."""
        error = TransportError("dropped")
        operation = _Flaky(5, error)

        result = await RetryPolicy(RetryConfig(backoff_ms=0)).execute(operation)

        assert not result.success
        assert result.error is error
        assert result.attempts == 3
        assert operation.calls == 3
        with pytest.raises(TransportError):
            result.unwrap()

    @pytest.mark.asyncio
    async def test_decode_error_not_retried(self) -> None:
        """Test a decode error surfaces on the first attempt."""
        operation = _Flaky(1, DecodeError("bad event"))

        result = await RetryPolicy(RetryConfig(backoff_ms=0)).execute(operation)

        assert not result.success
        assert isinstance(result.error, DecodeError)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the backoff is slept before each retry."""
        slept: list[float] = []

        async def fake_sleep(delay: float) -> None:
            slept.append(delay)

        monkeypatch.setattr("term_ai.resilience.retry.asyncio.sleep", fake_sleep)
        operation = _Flaky(2, TransportError("dropped"))

        result = await RetryPolicy(RetryConfig(backoff_ms=250)).execute(operation)

        assert result.success
        assert slept == [0.25, 0.25]
        assert result.total_delay_ms == pytest.approx(500.0)
