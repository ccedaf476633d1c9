"""High-level video catalog persistence built on the store components."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from catalog_store.codec import decode_item, encode_record
from catalog_store.errors import RecordNotFoundError, StoreError
from catalog_store.models import (
    TRANSCRIBED,
    UNTRANSCRIBED,
    BatchWriteResult,
    Clock,
    VideoRecord,
    utc_now,
)
from catalog_store.patterns.retry import RetryConfig
from catalog_store.persistence.batch_writer import BatchWriter
from catalog_store.persistence.scanner import PaginatedScanner
from catalog_store.persistence.status import StatusUpdater
from catalog_store.store.base import StoreClient

logger = logging.getLogger(__name__)


class VideoCatalogRepository:
    """Facade the surrounding application uses to persist catalog videos.

    Bulk saves go through a BatchWriter with the advanced retry policy. If
    that run fails as a whole (the store rejected a call outright instead of
    reporting unprocessed items), the same input is re-run once through a
    writer with the simple policy.

    Args:
        store: The store client, built once by the application.
        writer: Primary batch writer (default: advanced policy).
        fallback_writer: Last-resort writer (default: simple policy).
        scanner: Scanner for status queries.
        updater: Status flag updater.
        clock: Source of write timestamps for the default components.
    """

    def __init__(
        self,
        store: StoreClient,
        *,
        writer: BatchWriter | None = None,
        fallback_writer: BatchWriter | None = None,
        scanner: PaginatedScanner | None = None,
        updater: StatusUpdater | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or utc_now
        self._writer = writer or BatchWriter(store, RetryConfig.advanced(), clock=self._clock)
        self._fallback_writer = fallback_writer or BatchWriter(
            store, RetryConfig.simple(), clock=self._clock
        )
        self._scanner = scanner or PaginatedScanner(store)
        self._updater = updater or StatusUpdater(store, clock=self._clock)

    @property
    def store(self) -> StoreClient:
        return self._store

    def save_video(self, record: VideoRecord) -> VideoRecord:
        """Upsert a single record.

        Returns:
            VideoRecord: The record as written, timestamps included.

        Raises:
            MarshallingError: If the record cannot be stored.
            StoreError: If the put failed.
        """
        stamped = record.stamped(self._clock())
        self._store.put(encode_record(stamped))
        return stamped

    def save_videos(self, records: Sequence[VideoRecord]) -> BatchWriteResult:
        """Upsert many records.

        A store failure or a rejected batch that escapes the advanced writer
        triggers one rerun of the whole input under the simple policy. Other
        exceptions propagate.

        Raises:
            BatchWriteError: If any record remained unwritten.
        """
        if not records:
            return BatchWriteResult(total=0, processed=0, failed=0)

        try:
            result = self._writer.save_all(records)
        except (StoreError, ValueError) as exc:
            logger.warning(
                "Advanced batch write failed, falling back to simple retry policy: %s", exc
            )
            result = self._fallback_writer.save_all(records)

        result.raise_for_failures()
        return result

    def get_video(self, video_id: str) -> VideoRecord:
        """Fetch one record.

        Raises:
            RecordNotFoundError: If no record has this key.
        """
        item = self._store.get(video_id)
        if item is None:
            raise RecordNotFoundError(video_id)
        return decode_item(item)

    def set_transcribed(self, video_id: str, transcribed: bool = True) -> None:
        self._updater.set_transcribed(video_id, transcribed)

    def get_untranscribed_videos(self) -> list[VideoRecord]:
        return self._scanner.scan(UNTRANSCRIBED)

    def get_transcribed_videos(self) -> list[VideoRecord]:
        return self._scanner.scan(TRANSCRIBED)

    def ensure_table(self) -> bool:
        """Create the backing table when the store supports it.

        Returns:
            bool: True if a table was created.
        """
        ensure = getattr(self._store, "ensure_table", None)
        if ensure is None:
            return False
        return bool(ensure())

    def check_connection(self) -> dict[str, Any]:
        """Round-trip a throwaway record through the store.

        Returns:
            dict: The store description (when available) plus the test record id.

        Raises:
            StoreError: If any step of the round trip fails.
        """
        logger.info("Testing store connection...")
        details: dict[str, Any] = {}
        describe = getattr(self._store, "describe", None)
        if describe is not None:
            details.update(describe())

        now = self._clock()
        canary = VideoRecord(
            video_id=f"test_{int(now.timestamp())}",
            title="Test Video",
            author="Test Author",
            duration="00:01:00",
            views=0,
            description="Test description for connection test",
            url="https://www.youtube.com/watch?v=test",
        )
        self.save_video(canary)
        retrieved = self.get_video(canary.video_id)
        logger.info("Test video retrieved successfully: %s", retrieved.title)

        details["test_video_id"] = canary.video_id
        return details


__all__ = ["VideoCatalogRepository"]
