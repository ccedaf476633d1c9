"""Retry policy with per-cause backoff for batched store writes."""

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class BackoffStrategy(str, Enum):
    """Growth curve of the wait between attempts.

    Attributes:
        EXPONENTIAL: delay = base_delay × 2^retry
        LINEAR: delay = base_delay × retry
    """

    EXPONENTIAL = "exponential"
    LINEAR = "linear"


@dataclass(frozen=True, slots=True)
class Backoff:
    """Delay schedule indexed by the retry counter.

    Attributes:
        strategy: Exponential or linear growth.
        base_delay: Base delay in seconds.
        max_delay: Maximum delay cap in seconds (default: 60.0).
    """

    strategy: BackoffStrategy
    base_delay: float
    max_delay: float = 60.0

    def delay(self, retry: int) -> float:
        """Calculate the wait after the given retry.

        Args:
            retry: Retry counter after the failed attempt (1 for the first retry).

        Returns:
            Delay in seconds.
        """
        if self.strategy is BackoffStrategy.EXPONENTIAL:
            delay = self.base_delay * (2**retry)
        else:
            delay = self.base_delay * retry
        return float(min(delay, self.max_delay))


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Configuration for the batch write retry loop.

    One policy covers both failure classes: a whole call failing and a call
    that succeeds but leaves items unprocessed. Each has its own backoff.

    Attributes:
        max_attempts: Upper bound on batch calls per chunk (default: 5).
        call_failure_backoff: Wait after a failed call (default: 2^n seconds).
        partial_failure_backoff: Wait after a partial success (default: n × 500ms).
    """

    max_attempts: int = 5
    call_failure_backoff: Backoff = field(
        default=Backoff(BackoffStrategy.EXPONENTIAL, base_delay=1.0)
    )
    partial_failure_backoff: Backoff = field(
        default=Backoff(BackoffStrategy.LINEAR, base_delay=0.5)
    )

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def advanced(cls) -> "RetryConfig":
        """Five attempts, exponential wait on call failure, short linear wait otherwise."""
        return cls()

    @classmethod
    def simple(cls) -> "RetryConfig":
        """Three attempts with a linear one-second step for either failure class."""
        step = Backoff(BackoffStrategy.LINEAR, base_delay=1.0)
        return cls(max_attempts=3, call_failure_backoff=step, partial_failure_backoff=step)


@dataclass
class RetryMetrics:
    """Metrics for tracking retry operations."""

    retry_count: int = 0
    total_delay_ms: float = 0.0
    cancelled: bool = False


class RetryPolicy:
    """
    Attempt accounting and blocking backoff waits.

    The policy does not drive calls itself; callers own their loop and ask the
    policy whether attempts remain and to wait between them. Waits block the
    calling thread. When a cancellation event is supplied the wait returns
    early as soon as it is set.

    Metrics accumulate over the lifetime of the policy, across every loop
    that uses it, until reset_metrics() is called.

    Args:
        config: RetryConfig instance with retry parameters.
        cancel_event: Optional event that interrupts waits.

    Example:
        ```python
        policy = RetryPolicy(RetryConfig.simple())
        retries = 1
        if policy.attempts_remain(retries):
            policy.wait_after_partial_failure(retries)
        ```
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._config = config or RetryConfig()
        self._cancel_event = cancel_event
        self._metrics = RetryMetrics()

    @property
    def config(self) -> RetryConfig:
        return self._config

    @property
    def max_attempts(self) -> int:
        """Total number of attempts including the initial request."""
        return self._config.max_attempts

    @property
    def cancelled(self) -> bool:
        """True once the cancellation event has been set."""
        return self._cancel_event is not None and self._cancel_event.is_set()

    def attempts_remain(self, retry: int) -> bool:
        """Check whether another attempt is allowed after ``retry`` retries."""
        return retry < self._config.max_attempts

    def wait_after_call_failure(self, retry: int) -> bool:
        """Back off after a call that failed as a whole.

        Returns:
            bool: False if the wait was cancelled.
        """
        return self._wait(self._config.call_failure_backoff.delay(retry), "error")

    def wait_after_partial_failure(self, retry: int) -> bool:
        """Back off after a call that left items unprocessed.

        Returns:
            bool: False if the wait was cancelled.
        """
        return self._wait(self._config.partial_failure_backoff.delay(retry), "unprocessed items")

    def _wait(self, delay: float, reason: str) -> bool:
        if self.cancelled:
            self._metrics.cancelled = True
            return False

        logger.info("Waiting %.1fs before retry due to %s...", delay, reason)
        self._metrics.retry_count += 1
        self._metrics.total_delay_ms += delay * 1000

        if self._cancel_event is None:
            time.sleep(delay)
            return True

        if self._cancel_event.wait(delay):
            self._metrics.cancelled = True
            return False
        return True

    def get_metrics(self) -> RetryMetrics:
        """Get a snapshot of the retry metrics accumulated since creation or the last reset."""
        return RetryMetrics(
            retry_count=self._metrics.retry_count,
            total_delay_ms=self._metrics.total_delay_ms,
            cancelled=self._metrics.cancelled,
        )

    def reset_metrics(self) -> None:
        """Start a new accumulation window, e.g. before one save_all call."""
        self._metrics = RetryMetrics()


__all__ = [
    "Backoff",
    "BackoffStrategy",
    "RetryConfig",
    "RetryMetrics",
    "RetryPolicy",
]
