"""
Tests for the retry strategies used by read-only chain calls.
"""

import pytest
from unittest.mock import AsyncMock

from tradebot.core.recovery import (
    ExponentialBackoffStrategy,
    LikelyRevertError,
    ProviderUnavailableError,
    RetryConfig,
    RetryStrategy,
)


# =============================================================================
# Retry Config Tests
# =============================================================================

class TestRetryConfig:
    """Tests for delay calculation."""

    def test_delay_grows_exponentially(self):
        config = RetryConfig(initial_delay_seconds=1.0, exponential_base=2.0, jitter=False)

        assert config.get_delay(0) == 1.0
        assert config.get_delay(1) == 2.0
        assert config.get_delay(2) == 4.0

    def test_delay_is_capped(self):
        config = RetryConfig(initial_delay_seconds=1.0, max_delay_seconds=5.0, jitter=False)
        assert config.get_delay(10) == 5.0

    def test_jitter_stays_in_range(self):
        config = RetryConfig(initial_delay_seconds=1.0, jitter=True, jitter_factor=0.1)
        for _ in range(20):
            assert 0.9 <= config.get_delay(0) <= 1.1


# =============================================================================
# Retry Strategy Tests
# =============================================================================

class TestRetryStrategy:
    """Tests for RetryStrategy."""

    @pytest.fixture
    def strategy(self):
        return RetryStrategy(RetryConfig(max_attempts=3, initial_delay_seconds=0.001, jitter=False))

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, strategy):
        operation = AsyncMock(return_value="ok")

        assert await strategy.execute(operation) == "ok"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_provider_outage_is_retried(self, strategy):
        operation = AsyncMock(side_effect=[ProviderUnavailableError(), ProviderUnavailableError(), 42])

        assert await strategy.execute(operation, "eth_blockNumber") == 42
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, strategy):
        operation = AsyncMock(side_effect=ProviderUnavailableError())

        with pytest.raises(ProviderUnavailableError):
            await strategy.execute(operation)
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self, strategy):
        operation = AsyncMock(side_effect=LikelyRevertError())

        with pytest.raises(LikelyRevertError):
            await strategy.execute(operation)
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_not_retried(self, strategy):
        operation = AsyncMock(side_effect=ValueError("bad payload"))

        with pytest.raises(ValueError):
            await strategy.execute(operation)
        assert operation.await_count == 1


class TestExponentialBackoffStrategy:
    """Tests for ExponentialBackoffStrategy."""

    def test_builds_jittered_config(self):
        strategy = ExponentialBackoffStrategy(max_attempts=5, initial_delay=0.25, max_delay=2.0)

        assert strategy.config.max_attempts == 5
        assert strategy.config.initial_delay_seconds == 0.25
        assert strategy.config.max_delay_seconds == 2.0
        assert strategy.config.jitter is True
