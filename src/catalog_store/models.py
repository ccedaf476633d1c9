"""Domain models for the video catalog store.

This module defines the record persisted in the store and the value objects
exchanged between the store adapters and the persistence components.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from catalog_store.errors import BatchWriteError

WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"

Item = dict[str, Any]
"""Marshalled form of a VideoRecord as handed to a StoreClient."""

Cursor = dict[str, Any]
"""Opaque continuation cursor returned by a scan page."""

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class VideoRecord:
    """Metadata for a single catalog video.

    This dataclass is immutable (frozen=True) and uses slots for memory efficiency.
    No validation happens at construction time; a record that cannot be stored
    is rejected when it is marshalled.

    Attributes:
        video_id: Primary key, unique across the store.
        title: Video title.
        author: Channel or uploader name.
        duration: Human readable duration, e.g. "00:03:15".
        views: View count, non-negative.
        description: Free-form description text.
        url: Watch URL.
        transcribed: Transcription status flag. Changed only through
            StatusUpdater, never by a full-record write.
        created_at: Set when the record is first written.
        updated_at: Set on every write.
    """

    video_id: str
    title: str = ""
    author: str = ""
    duration: str = ""
    views: int = 0
    description: str = ""
    url: str = ""
    transcribed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_playlist_item(
        cls,
        video_id: str,
        title: str,
        *,
        duration: str = "",
        views: int = 0,
        author: str = "",
        description: str = "",
    ) -> VideoRecord:
        """Build a fresh record from catalog playlist data.

        Args:
            video_id: The catalog video identifier.
            title: Title as listed in the playlist.
            duration: Formatted duration.
            views: View count.
            author: Channel name.
            description: Video description.

        Returns:
            A record with its watch URL filled in and ``transcribed=False``.
        """
        return cls(
            video_id=video_id,
            title=title,
            author=author,
            duration=duration,
            views=views,
            description=description,
            url=WATCH_URL_TEMPLATE.format(video_id=video_id),
            transcribed=False,
        )

    def stamped(self, now: datetime) -> VideoRecord:
        """Return a copy carrying write timestamps.

        ``created_at`` is kept when the record already has one (it was read
        back from the store), otherwise it becomes ``now``.
        """
        return dataclasses.replace(
            self,
            created_at=self.created_at if self.created_at is not None else now,
            updated_at=now,
        )


RECORD_FIELDS: frozenset[str] = frozenset(f.name for f in dataclasses.fields(VideoRecord))


@dataclass(frozen=True, slots=True)
class FieldEquals:
    """Server-side equality filter on a single record attribute."""

    field: str
    value: Any

    def __post_init__(self) -> None:
        if self.field not in RECORD_FIELDS:
            raise ValueError(f"unknown record field: {self.field!r}")

    def matches(self, item: Item) -> bool:
        """Evaluate the filter against a marshalled item."""
        return self.field in item and item[self.field] == self.value


UNTRANSCRIBED = FieldEquals("transcribed", False)
TRANSCRIBED = FieldEquals("transcribed", True)


@dataclass(frozen=True, slots=True)
class ScanPage:
    """One bounded page of scan results.

    Attributes:
        items: Items on this page that matched the filter. May be empty even
            when more pages follow.
        cursor: Continuation cursor, or None once the scan is exhausted.
    """

    items: list[Item]
    cursor: Cursor | None = None


@dataclass(frozen=True, slots=True)
class BatchWriteResult:
    """Aggregate outcome of BatchWriter.save_all.

    Attributes:
        total: Number of records handed to the writer.
        processed: Records the store acknowledged.
        failed: Records not written, for any reason.
        failed_ids: Keys of the failed records, in input order where known.
        cancelled: True when a cancellation signal cut the run short.
    """

    total: int
    processed: int
    failed: int
    failed_ids: tuple[str, ...] = field(default=())
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """True when every record was written."""
        return self.failed == 0

    def raise_for_failures(self) -> None:
        """Raise BatchWriteError if any record remained unwritten."""
        if self.failed > 0:
            raise BatchWriteError(self)


__all__ = [
    "Clock",
    "Cursor",
    "FieldEquals",
    "Item",
    "RECORD_FIELDS",
    "BatchWriteResult",
    "ScanPage",
    "TRANSCRIBED",
    "UNTRANSCRIBED",
    "VideoRecord",
    "WATCH_URL_TEMPLATE",
    "utc_now",
]
