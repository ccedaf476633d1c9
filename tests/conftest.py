"""Pytest configuration and fixtures for catalog-store tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from catalog_store.models import VideoRecord
from catalog_store.store import InMemoryStore


@pytest.fixture()
def fixed_now() -> datetime:
    """A fixed, timezone-aware write time."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def clock(fixed_now: datetime) -> Callable[[], datetime]:
    """Clock that always returns ``fixed_now``."""
    return lambda: fixed_now


@pytest.fixture()
def ticking_clock(fixed_now: datetime) -> Callable[[], datetime]:
    """Clock that advances one second per call."""
    ticks = iter(range(10_000))
    return lambda: fixed_now + timedelta(seconds=next(ticks))


@pytest.fixture()
def make_records() -> Callable[..., list[VideoRecord]]:
    """Factory for catalog records with predictable, sortable ids."""

    def _make(count: int, prefix: str = "vid") -> list[VideoRecord]:
        return [
            VideoRecord.from_playlist_item(
                f"{prefix}{i:04d}",
                f"Video {i}",
                duration="00:03:15",
                views=i * 10,
                author="Channel",
                description=f"Description {i}",
            )
            for i in range(count)
        ]

    return _make


@pytest.fixture()
def memory_store() -> InMemoryStore:
    """Empty in-memory store with small pages."""
    return InMemoryStore(page_size=2)


@pytest.fixture()
def no_sleep() -> Iterator[MagicMock]:
    """Replace blocking backoff sleeps with a recording mock."""
    with patch("catalog_store.patterns.retry.time.sleep") as sleep:
        yield sleep
