"""Catalog Store.

Client-side persistence for video catalog metadata: chunked batch upserts with
partial-failure retry, cursor-driven filtered scans and single-field status
updates over a remote keyed store.
"""

from catalog_store.errors import (
    BatchWriteError,
    MarshallingError,
    RecordNotFoundError,
    ScanError,
    StoreError,
    TransientStoreError,
)
from catalog_store.models import (
    TRANSCRIBED,
    UNTRANSCRIBED,
    BatchWriteResult,
    FieldEquals,
    ScanPage,
    VideoRecord,
)
from catalog_store.patterns.retry import RetryConfig, RetryPolicy
from catalog_store.persistence import (
    BatchWriter,
    PaginatedScanner,
    StatusUpdater,
    VideoCatalogRepository,
)
from catalog_store.store import DynamoStore, InMemoryStore, StoreClient

__version__ = "0.1.0"

__all__ = [
    "BatchWriteError",
    "BatchWriteResult",
    "BatchWriter",
    "DynamoStore",
    "FieldEquals",
    "InMemoryStore",
    "MarshallingError",
    "PaginatedScanner",
    "RecordNotFoundError",
    "RetryConfig",
    "RetryPolicy",
    "ScanError",
    "ScanPage",
    "StatusUpdater",
    "StoreClient",
    "StoreError",
    "TRANSCRIBED",
    "TransientStoreError",
    "UNTRANSCRIBED",
    "VideoCatalogRepository",
    "VideoRecord",
]
