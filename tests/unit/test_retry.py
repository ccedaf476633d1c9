"""Tests for the retry policy and backoff schedules."""

import threading
from dataclasses import FrozenInstanceError
from unittest.mock import patch

import pytest

from catalog_store.patterns.retry import (
    Backoff,
    BackoffStrategy,
    RetryConfig,
    RetryMetrics,
    RetryPolicy,
)


class TestBackoff:
    """Tests for delay calculation."""

    def test_exponential_delay(self) -> None:
        """Exponential backoff doubles per retry."""
        backoff = Backoff(BackoffStrategy.EXPONENTIAL, base_delay=1.0)
        assert [backoff.delay(n) for n in range(1, 5)] == [2.0, 4.0, 8.0, 16.0]

    def test_linear_delay(self) -> None:
        """Linear backoff grows by one step per retry."""
        backoff = Backoff(BackoffStrategy.LINEAR, base_delay=0.5)
        assert [backoff.delay(n) for n in range(1, 5)] == [0.5, 1.0, 1.5, 2.0]

    def test_delay_is_capped(self) -> None:
        """Delays never exceed max_delay."""
        backoff = Backoff(BackoffStrategy.EXPONENTIAL, base_delay=1.0, max_delay=10.0)
        assert backoff.delay(10) == 10.0


class TestRetryConfig:
    """Tests for RetryConfig dataclass."""

    def test_default_config_is_advanced(self) -> None:
        config = RetryConfig()
        assert config == RetryConfig.advanced()
        assert config.max_attempts == 5
        assert config.call_failure_backoff.strategy is BackoffStrategy.EXPONENTIAL
        assert config.partial_failure_backoff.delay(1) == 0.5

    def test_simple_preset(self) -> None:
        config = RetryConfig.simple()
        assert config.max_attempts == 3
        assert config.call_failure_backoff.delay(2) == 2.0
        assert config.partial_failure_backoff.delay(2) == 2.0

    def test_config_is_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            RetryConfig().max_attempts = 1  # type: ignore[misc]

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError, match="max_attempts"):
            RetryConfig(max_attempts=0)


class TestRetryPolicy:
    """Tests for attempt accounting and waits."""

    def test_attempts_remain(self) -> None:
        policy = RetryPolicy(RetryConfig.simple())
        assert policy.attempts_remain(0)
        assert policy.attempts_remain(2)
        assert not policy.attempts_remain(3)

    def test_waits_use_matching_backoff(self) -> None:
        """Each failure class waits on its own schedule."""
        policy = RetryPolicy()
        with patch("catalog_store.patterns.retry.time.sleep") as sleep:
            assert policy.wait_after_call_failure(2) is True
            assert policy.wait_after_partial_failure(2) is True

        assert [c.args[0] for c in sleep.call_args_list] == [4.0, 1.0]

    def test_metrics_accumulate(self) -> None:
        policy = RetryPolicy()
        with patch("catalog_store.patterns.retry.time.sleep"):
            policy.wait_after_call_failure(1)
            policy.wait_after_partial_failure(1)

        metrics = policy.get_metrics()
        assert isinstance(metrics, RetryMetrics)
        assert metrics.retry_count == 2
        assert metrics.total_delay_ms == pytest.approx(2500.0)
        assert not metrics.cancelled

        policy.reset_metrics()
        assert policy.get_metrics().retry_count == 0

    def test_cancelled_event_skips_wait(self) -> None:
        """A set cancellation event makes waits return False immediately."""
        cancel = threading.Event()
        cancel.set()
        policy = RetryPolicy(cancel_event=cancel)

        with patch("catalog_store.patterns.retry.time.sleep") as sleep:
            assert policy.wait_after_call_failure(4) is False

        sleep.assert_not_called()
        assert policy.cancelled
        assert policy.get_metrics().cancelled

    def test_event_wait_used_when_cancellable(self) -> None:
        """With an event, the wait blocks on the event for the backoff delay."""
        cancel = threading.Event()
        policy = RetryPolicy(
            RetryConfig(partial_failure_backoff=Backoff(BackoffStrategy.LINEAR, 0.01)),
            cancel_event=cancel,
        )

        with patch.object(cancel, "wait", return_value=False) as wait:
            assert policy.wait_after_partial_failure(3) is True

        wait.assert_called_once_with(pytest.approx(0.03))

    def test_cancel_during_wait(self) -> None:
        """An event fired during the wait interrupts it."""
        cancel = threading.Event()
        timer = threading.Timer(0.05, cancel.set)
        policy = RetryPolicy(cancel_event=cancel)

        timer.start()
        try:
            assert policy.wait_after_call_failure(5) is False
        finally:
            timer.cancel()
