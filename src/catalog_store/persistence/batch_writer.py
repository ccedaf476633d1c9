"""Chunked batch writer with partial-failure retry."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from catalog_store.codec import encode_record
from catalog_store.errors import MarshallingError, StoreError, TransientStoreError
from catalog_store.models import BatchWriteResult, Clock, Item, VideoRecord, utc_now
from catalog_store.patterns.retry import RetryConfig, RetryPolicy
from catalog_store.store.base import StoreClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChunkOutcome:
    """Result of writing one chunk.

    Attributes:
        processed: Items acknowledged by the store.
        failed_ids: Keys of records that were not written.
        cancelled: True if a cancelled wait ended the retry loop.
    """

    processed: int
    failed_ids: tuple[str, ...]
    cancelled: bool = False


class BatchWriter:
    """Upserts any number of records in store-sized batches.

    The input is split into consecutive chunks of ``store.batch_limit``
    records. Each chunk is submitted as one batch call and the unprocessed
    remainder is resubmitted under the retry policy until it is empty or the
    attempt limit is reached. A chunk that exhausts its attempts never stops
    the following chunks.

    Records that cannot be marshalled are dropped from their chunk before
    submission and counted as failed without consuming an attempt.

    Args:
        store: Target store.
        config: Retry parameters (default: RetryConfig.advanced()).
        policy: Pre-built policy, e.g. one sharing a cancellation event.
        clock: Source of write timestamps.

    Example:
        ```python
        writer = BatchWriter(store)
        result = writer.save_all(records)
        result.raise_for_failures()
        ```
    """

    def __init__(
        self,
        store: StoreClient,
        config: RetryConfig | None = None,
        *,
        policy: RetryPolicy | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._policy = policy or RetryPolicy(config or RetryConfig.advanced())
        self._clock = clock or utc_now

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def batch_size(self) -> int:
        return self._store.batch_limit

    def save_all(self, records: Sequence[VideoRecord]) -> BatchWriteResult:
        """Write every record, chunk by chunk.

        Args:
            records: Records to upsert. Timestamps are set here.

        Returns:
            BatchWriteResult: Aggregate counts; ``processed + failed`` always
            equals ``len(records)``.
        """
        total = len(records)
        if total == 0:
            return BatchWriteResult(total=0, processed=0, failed=0)

        batch_size = self.batch_size
        processed = 0
        failed_ids: list[str] = []
        cancelled = False

        for start in range(0, total, batch_size):
            chunk = records[start : start + batch_size]
            if cancelled:
                failed_ids.extend(record.video_id for record in chunk)
                continue

            outcome = self._write_chunk(chunk)
            processed += outcome.processed
            failed_ids.extend(outcome.failed_ids)
            cancelled = outcome.cancelled

        failed = len(failed_ids)
        logger.info(
            "Batch write completed: %d successful, %d failed out of %d total videos",
            processed,
            failed,
            total,
        )
        if cancelled:
            logger.warning("Batch write cancelled; %d records were not written", failed)

        return BatchWriteResult(
            total=total,
            processed=processed,
            failed=failed,
            failed_ids=tuple(failed_ids),
            cancelled=cancelled,
        )

    def _marshal_chunk(
        self, chunk: Sequence[VideoRecord]
    ) -> tuple[list[Item], Counter[str], list[str]]:
        """Marshal a chunk, dropping unstorable records and repeated keys.

        A key listed more than once in a chunk is submitted once, carrying
        the last copy; the store rejects batches with duplicate keys.

        Returns:
            The items to submit, the number of input records behind each
            submitted key, and the keys of records that failed to marshal.
        """
        now = self._clock()
        by_id: dict[str, Item] = {}
        copies: Counter[str] = Counter()
        rejected: list[str] = []
        for record in chunk:
            try:
                item = encode_record(record.stamped(now))
            except MarshallingError as exc:
                logger.error("Failed to marshal video record %s: %s", record.video_id, exc)
                rejected.append(str(record.video_id))
                continue
            by_id[item["video_id"]] = item
            copies[item["video_id"]] += 1

        duplicates = sum(copies.values()) - len(by_id)
        if duplicates:
            logger.info("Collapsed %d duplicate video ids within one batch", duplicates)
        return list(by_id.values()), copies, rejected

    def _write_chunk(self, chunk: Sequence[VideoRecord]) -> ChunkOutcome:
        """Handle a single chunk with retry logic."""
        remaining, copies, rejected = self._marshal_chunk(chunk)
        submitted = len(remaining)
        max_attempts = self._policy.max_attempts
        retry_count = 0
        cancelled = False

        while remaining and self._policy.attempts_remain(retry_count):
            try:
                unprocessed = self._store.batch_write(remaining)
            except TransientStoreError as exc:
                logger.warning("Batch write error (retry %d): %s", retry_count, exc)
                retry_count += 1
                if self._policy.attempts_remain(retry_count):
                    if not self._policy.wait_after_call_failure(retry_count):
                        cancelled = True
                        break
                continue
            except StoreError as exc:
                # Permanent for this chunk: retrying the same request cannot succeed.
                logger.error("Batch write rejected, %d items failed: %s", len(remaining), exc)
                break

            if not unprocessed:
                remaining = []
                break

            remaining = list(unprocessed)
            retry_count += 1
            logger.info(
                "Batch partially successful. %d unprocessed items remaining (attempt %d/%d)",
                len(remaining),
                retry_count + 1,
                max_attempts,
            )
            if self._policy.attempts_remain(retry_count):
                if not self._policy.wait_after_partial_failure(retry_count):
                    cancelled = True
                    break

        unwritten = [
            video_id
            for video_id in (str(item.get("video_id")) for item in remaining)
            for _ in range(copies.get(video_id, 1))
        ]
        if remaining:
            logger.warning(
                "Warning: %d items could not be written after %d attempts",
                len(remaining),
                retry_count,
            )
        elif submitted:
            logger.info("Successfully saved batch of %d videos", submitted)

        return ChunkOutcome(
            processed=sum(copies.values()) - len(unwritten),
            failed_ids=tuple(rejected + unwritten),
            cancelled=cancelled,
        )


__all__ = ["BatchWriter", "ChunkOutcome"]
