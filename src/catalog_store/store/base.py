"""Base Protocol for remote keyed stores.

This module defines the StoreClient protocol that every store adapter must follow.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from catalog_store.models import Cursor, FieldEquals, Item, ScanPage

DEFAULT_BATCH_LIMIT = 25


@runtime_checkable
class StoreClient(Protocol):
    """Protocol defining the primitive operations of a remote keyed store.

    Items are marshalled records (see ``catalog_store.codec``) keyed by
    ``video_id``. Adapters raise ``TransientStoreError`` for failures worth
    retrying and ``StoreError`` for everything else.

    Example:
        >>> from catalog_store.store import InMemoryStore, StoreClient
        >>> isinstance(InMemoryStore(), StoreClient)
        True
    """

    @property
    def batch_limit(self) -> int:
        """Maximum number of items accepted by one batch_write call."""
        ...

    def get(self, video_id: str) -> Item | None:
        """Fetch one item by key, or None when it does not exist."""
        ...

    def put(self, item: Item) -> None:
        """Upsert one item."""
        ...

    def batch_write(self, items: Sequence[Item]) -> list[Item]:
        """Upsert up to ``batch_limit`` items.

        Returns:
            The items the store reports as not written. An empty list means
            the whole batch was written.
        """
        ...

    def scan(self, condition: FieldEquals, cursor: Cursor | None = None) -> ScanPage:
        """Fetch one filtered page, starting after ``cursor``."""
        ...

    def update(self, video_id: str, values: Mapping[str, Any]) -> None:
        """Set the given attributes on an existing item.

        Raises:
            RecordNotFoundError: If no item has this key.
        """
        ...


def check_batch_size(items: Sequence[Item], limit: int) -> None:
    """Reject a batch larger than the store accepts before any remote call."""
    if len(items) > limit:
        raise ValueError(f"batch of {len(items)} items exceeds the store limit of {limit}")


__all__ = ["DEFAULT_BATCH_LIMIT", "StoreClient", "check_batch_size"]
