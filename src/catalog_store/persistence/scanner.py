"""Cursor-driven scan that assembles a complete filtered result set."""

from __future__ import annotations

import logging

from catalog_store.codec import decode_item
from catalog_store.errors import MarshallingError, ScanError, TransientStoreError
from catalog_store.models import Cursor, FieldEquals, ScanPage, VideoRecord
from catalog_store.patterns.retry import RetryConfig, RetryPolicy
from catalog_store.store.base import StoreClient

logger = logging.getLogger(__name__)


class PaginatedScanner:
    """Walks every page of a filtered scan.

    Each call to :meth:`scan` starts from an empty cursor and requests pages
    until the store returns no cursor. A page request that fails transiently
    is repeated with the same cursor under the retry policy; items that fail
    to decode are logged and left out of the result.

    Args:
        store: Store to scan.
        config: Retry parameters for failed page requests
            (default: RetryConfig.simple()).
        policy: Pre-built policy, overrides ``config``.
    """

    def __init__(
        self,
        store: StoreClient,
        config: RetryConfig | None = None,
        *,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._store = store
        self._policy = policy or RetryPolicy(config or RetryConfig.simple())
        self._last_page_count = 0

    @property
    def last_page_count(self) -> int:
        """Number of pages fetched by the most recent scan."""
        return self._last_page_count

    def scan(self, condition: FieldEquals) -> list[VideoRecord]:
        """Return every record matching ``condition``.

        Raises:
            ScanError: If a page could not be fetched within the retry policy.
        """
        records: list[VideoRecord] = []
        cursor: Cursor | None = None
        pages = 0
        skipped = 0

        while True:
            page = self._fetch_page(condition, cursor)
            pages += 1
            for item in page.items:
                try:
                    records.append(decode_item(item))
                except MarshallingError as exc:
                    skipped += 1
                    logger.warning("Failed to unmarshal video record: %s", exc)

            if page.cursor is None:
                break
            cursor = page.cursor

        self._last_page_count = pages
        logger.info(
            "Found %d videos with %s=%r across %d pages (%d skipped)",
            len(records),
            condition.field,
            condition.value,
            pages,
            skipped,
        )
        return records

    def _fetch_page(self, condition: FieldEquals, cursor: Cursor | None) -> ScanPage:
        retry_count = 0
        while True:
            try:
                return self._store.scan(condition, cursor)
            except TransientStoreError as exc:
                retry_count += 1
                logger.warning("Scan page error (retry %d): %s", retry_count, exc)
                if not self._policy.attempts_remain(retry_count):
                    raise ScanError(
                        f"scan for {condition.field}={condition.value!r} failed after "
                        f"{retry_count} attempts: {exc}"
                    ) from exc
                if not self._policy.wait_after_call_failure(retry_count):
                    raise ScanError("scan cancelled") from exc


__all__ = ["PaginatedScanner"]
