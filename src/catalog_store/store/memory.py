"""In-process store with the paging and batching behaviour of DynamoDB."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from catalog_store.errors import RecordNotFoundError, StoreError
from catalog_store.models import Cursor, FieldEquals, Item, ScanPage
from catalog_store.store.base import DEFAULT_BATCH_LIMIT, StoreClient, check_batch_size

logger = logging.getLogger(__name__)

# Attributes a full-item overwrite must not reset on an existing item.
PRESERVED_ON_PUT = ("created_at", "transcribed")


class InMemoryStore(StoreClient):
    """Dict-backed StoreClient.

    Scans walk keys in sorted order and evaluate ``page_size`` items per page
    before the filter is applied, so a page may be empty and still carry a
    cursor. The cursor is the last evaluated key. Items are deep-copied on the
    way in and out.

    Args:
        page_size: Items evaluated per scan page.
        batch_limit: Maximum items per batch_write call.
    """

    def __init__(self, page_size: int = 100, batch_limit: int = DEFAULT_BATCH_LIMIT) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._page_size = page_size
        self._batch_limit = batch_limit
        self._items: dict[str, Item] = {}

    @property
    def batch_limit(self) -> int:
        """Maximum number of items accepted by one batch_write call."""
        return self._batch_limit

    @property
    def page_size(self) -> int:
        return self._page_size

    def __len__(self) -> int:
        return len(self._items)

    def get(self, video_id: str) -> Item | None:
        item = self._items.get(video_id)
        return copy.deepcopy(item) if item is not None else None

    def put(self, item: Item) -> None:
        video_id = item["video_id"]
        stored = copy.deepcopy(item)
        existing = self._items.get(video_id)
        if existing is not None:
            for name in PRESERVED_ON_PUT:
                if name in existing:
                    stored[name] = existing[name]
        self._items[video_id] = stored

    def batch_write(self, items: Sequence[Item]) -> list[Item]:
        check_batch_size(items, self._batch_limit)
        keys = [item["video_id"] for item in items]
        if len(set(keys)) != len(keys):
            raise StoreError("batch write failed: provided list of item keys contains duplicates")
        for item in items:
            self.put(item)
        return []

    def scan(self, condition: FieldEquals, cursor: Cursor | None = None) -> ScanPage:
        keys = sorted(self._items)
        start = 0
        if cursor is not None:
            last_key = cursor["video_id"]
            start = next((i for i, key in enumerate(keys) if key > last_key), len(keys))

        evaluated = keys[start : start + self._page_size]
        matched = [
            copy.deepcopy(self._items[key])
            for key in evaluated
            if condition.matches(self._items[key])
        ]

        next_cursor: Cursor | None = None
        if start + self._page_size < len(keys):
            next_cursor = {"video_id": evaluated[-1]}
        return ScanPage(items=matched, cursor=next_cursor)

    def update(self, video_id: str, values: Mapping[str, Any]) -> None:
        existing = self._items.get(video_id)
        if existing is None:
            raise RecordNotFoundError(video_id)
        existing.update(copy.deepcopy(dict(values)))
        logger.debug("Updated %s on %s", sorted(values), video_id)


__all__ = ["InMemoryStore", "PRESERVED_ON_PUT"]
