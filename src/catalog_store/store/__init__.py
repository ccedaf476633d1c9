"""Store adapters implementing the StoreClient protocol."""

from catalog_store.store.base import DEFAULT_BATCH_LIMIT, StoreClient
from catalog_store.store.dynamodb import DynamoStore
from catalog_store.store.memory import InMemoryStore

__all__ = [
    "DEFAULT_BATCH_LIMIT",
    "DynamoStore",
    "InMemoryStore",
    "StoreClient",
]
