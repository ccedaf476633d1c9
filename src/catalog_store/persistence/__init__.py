"""Persistence components: batched writes, paginated scans and status updates."""

from catalog_store.persistence.batch_writer import BatchWriter, ChunkOutcome
from catalog_store.persistence.repository import VideoCatalogRepository
from catalog_store.persistence.scanner import PaginatedScanner
from catalog_store.persistence.status import StatusUpdater

__all__ = [
    "BatchWriter",
    "ChunkOutcome",
    "PaginatedScanner",
    "StatusUpdater",
    "VideoCatalogRepository",
]
