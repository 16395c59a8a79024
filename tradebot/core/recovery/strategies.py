"""
Recovery Strategies

Retry handling for read-only chain calls (quotes, balances, gas estimates).
Transaction submission is never routed through these strategies: a resent
transaction can reuse a nonce.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Optional, TypeVar

from .errors import TradeError

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    initial_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_factor: float = 0.1

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given attempt number."""
        delay = min(
            self.initial_delay_seconds * (self.exponential_base ** attempt),
            self.max_delay_seconds,
        )
        if self.jitter:
            jitter_range = delay * self.jitter_factor
            delay += random.uniform(-jitter_range, jitter_range)
        return max(delay, 0)


class RetryStrategy:
    """
    Simple retry strategy with configurable attempts.

    Only errors flagged ``retryable`` (provider outages) are retried; every
    other ``TradeError`` and any unexpected exception propagates immediately.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or RetryConfig()
        self.logger = logger or logging.getLogger(__name__)

    async def execute(
        self,
        operation: Callable[[], Coroutine[Any, Any, T]],
        operation_name: str = "operation",
    ) -> T:
        last_error: Optional[Exception] = None

        for attempt in range(self.config.max_attempts):
            try:
                return await operation()
            except Exception as e:
                last_error = e

                if not self.should_retry(e, attempt):
                    raise

                delay = self.config.get_delay(attempt)
                self.logger.warning(
                    f"{operation_name} attempt {attempt + 1}/{self.config.max_attempts} failed: {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

        raise last_error or RuntimeError("All retry attempts exhausted")

    def should_retry(self, error: Exception, attempt: int) -> bool:
        if attempt >= self.config.max_attempts - 1:
            return False
        return isinstance(error, TradeError) and error.retryable


class ExponentialBackoffStrategy(RetryStrategy):
    """Retry strategy with exponential backoff and jitter."""

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 0.5,
        max_delay: float = 8.0,
        exponential_base: float = 2.0,
        logger: Optional[logging.Logger] = None,
    ):
        config = RetryConfig(
            max_attempts=max_attempts,
            initial_delay_seconds=initial_delay,
            max_delay_seconds=max_delay,
            exponential_base=exponential_base,
            jitter=True,
        )
        super().__init__(config, logger)
