"""Configuration for the store adapters."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DynamoStoreConfig:
    """Configuration for DynamoStore.

    Credentials are not part of this configuration; boto3 resolves them
    through its default provider chain.

    Attributes:
        table_name: DynamoDB table holding the video records (default: "videos").
        region_name: AWS region, None to let boto3 decide.
        endpoint_url: Override endpoint, e.g. a local DynamoDB.
        page_size: Items evaluated per scan page, None for the service default.
        table_wait_seconds: Upper bound on waiting for a new table to become active.
    """

    table_name: str = "videos"
    region_name: str | None = None
    endpoint_url: str | None = None
    page_size: int | None = None
    table_wait_seconds: float = 300.0

    @classmethod
    def from_env(cls) -> DynamoStoreConfig:
        """Build a configuration from environment variables.

        Reads ``CATALOG_STORE_TABLE``, ``AWS_REGION``,
        ``CATALOG_STORE_ENDPOINT_URL`` and ``CATALOG_STORE_PAGE_SIZE``.
        """
        page_size = os.getenv("CATALOG_STORE_PAGE_SIZE")
        return cls(
            table_name=os.getenv("CATALOG_STORE_TABLE", "videos"),
            region_name=os.getenv("AWS_REGION") or None,
            endpoint_url=os.getenv("CATALOG_STORE_ENDPOINT_URL") or None,
            page_size=int(page_size) if page_size else None,
        )


__all__ = ["DynamoStoreConfig"]
