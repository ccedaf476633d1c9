"""Resilience patterns module."""

from catalog_store.patterns.retry import (
    Backoff,
    BackoffStrategy,
    RetryConfig,
    RetryMetrics,
    RetryPolicy,
)

__all__ = [
    # Retry
    "Backoff",
    "BackoffStrategy",
    "RetryConfig",
    "RetryMetrics",
    "RetryPolicy",
]
