"""
Bounded retry policy.

Used wherever eventual-consistency lag between two writes must be
tolerated (e.g. an identity created before its profile row).
Retries only on the exception types the caller names; everything
else propagates on the first occurrence.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an async operation a bounded number of times.

    Attributes:
        max_attempts: Total attempts, including the first one.
        delay_seconds: Wait before the second attempt.
        backoff: Multiplier applied to the wait after each retry
            (1.0 keeps the delay fixed).
    """

    max_attempts: int = 3
    delay_seconds: float = 2.0
    backoff: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {self.max_attempts}"
            raise ValueError(msg)
        if self.delay_seconds < 0:
            msg = f"delay_seconds must be >= 0, got {self.delay_seconds}"
            raise ValueError(msg)

    def delay_for(self, retry_number: int) -> float:
        """Return the wait before retry number retry_number (1-based)."""
        return self.delay_seconds * (self.backoff ** (retry_number - 1))

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        retry_on: tuple[type[BaseException], ...],
        sleep: Sleeper = asyncio.sleep,
        label: str = "operation",
    ) -> T:
        """Run operation until it succeeds or attempts are exhausted.

        Args:
            operation: Zero-argument coroutine factory.
            retry_on: Exception types that trigger a retry.
            sleep: Awaitable sleep function (injectable for tests).
            label: Name used in log messages.

        Returns:
            The operation's result.

        Raises:
            The last retryable exception once attempts run out, or any
            non-retryable exception immediately.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except retry_on as exc:
                if attempt >= self.max_attempts:
                    logger.warning(
                        "%s failed after %d attempt(s): %s",
                        label,
                        attempt,
                        exc,
                    )
                    raise
                delay = self.delay_for(attempt)
                logger.info(
                    "%s attempt %d failed (%s), retrying in %.1fs...",
                    label,
                    attempt,
                    type(exc).__name__,
                    delay,
                )
                await sleep(delay)
                attempt += 1
