"""Exception hierarchy for the catalog store client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalog_store.models import BatchWriteResult


class StoreError(Exception):
    """Base class for every error raised by the store layer."""

    pass


class TransientStoreError(StoreError):
    """A whole remote call failed for a reason worth retrying.

    Throttling, connectivity loss and server-side 5xx errors land here.
    Nothing is known to have been written when this is raised.
    """

    pass


class RecordNotFoundError(StoreError):
    """Raised when a point operation targets a key that does not exist."""

    def __init__(self, video_id: str) -> None:
        super().__init__(f"video not found: {video_id}")
        self.video_id = video_id


class MarshallingError(StoreError, ValueError):
    """A record cannot be converted to or from its stored form."""

    pass


class ScanError(StoreError):
    """Raised when a paginated scan cannot fetch its next page."""

    pass


class BatchWriteError(StoreError):
    """Raised when records remain unwritten after every chunk was attempted."""

    def __init__(self, result: BatchWriteResult) -> None:
        super().__init__(
            f"failed to write {result.failed} out of {result.total} items to the store"
        )
        self.result = result


__all__ = [
    "BatchWriteError",
    "MarshallingError",
    "RecordNotFoundError",
    "ScanError",
    "StoreError",
    "TransientStoreError",
]
