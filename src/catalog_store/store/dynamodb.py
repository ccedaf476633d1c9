"""DynamoDB adapter for the StoreClient protocol using boto3."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from catalog_store.config import DynamoStoreConfig
from catalog_store.errors import RecordNotFoundError, StoreError, TransientStoreError
from catalog_store.models import Cursor, FieldEquals, Item, ScanPage
from catalog_store.store.base import DEFAULT_BATCH_LIMIT, StoreClient, check_batch_size

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = "video_id"

TRANSIENT_ERROR_CODES = frozenset(
    {
        "InternalServerError",
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
        "ServiceUnavailable",
        "ThrottlingException",
    }
)

# Kept from the existing item when a full item is put.
_PUT_IF_NOT_EXISTS = ("created_at", "transcribed")


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _is_transient_error(exc: BaseException) -> bool:
    """Check if a botocore exception represents a retryable failure.

    Args:
        exc: The exception to check.

    Returns:
        bool: True for throttling, server-side and connectivity errors.
    """
    if isinstance(exc, ClientError):
        return _error_code(exc) in TRANSIENT_ERROR_CODES
    return isinstance(exc, EndpointConnectionError | ConnectionClosedError | ReadTimeoutError)


def _translate(exc: ClientError | BotoCoreError, action: str) -> StoreError:
    if _is_transient_error(exc):
        return TransientStoreError(f"{action} failed: {exc}")
    return StoreError(f"{action} failed: {exc}")


class DynamoStore(StoreClient):
    """StoreClient backed by a single DynamoDB table keyed by ``video_id``.

    Uses the low-level client so that ``BatchWriteItem`` reports unprocessed
    items back to the caller instead of retrying them internally.

    Args:
        config: Table and endpoint settings.
        client: Pre-built ``dynamodb`` client; one is created from ``config``
            when omitted.

    Example:
        ```python
        store = DynamoStore(DynamoStoreConfig(table_name="videos", region_name="ap-northeast-1"))
        store.ensure_table()
        ```
    """

    def __init__(self, config: DynamoStoreConfig | None = None, client: Any = None) -> None:
        self._config = config or DynamoStoreConfig()
        self._client = client or boto3.client(
            "dynamodb",
            region_name=self._config.region_name,
            endpoint_url=self._config.endpoint_url,
        )
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    @property
    def batch_limit(self) -> int:
        """DynamoDB accepts at most 25 put requests per BatchWriteItem."""
        return DEFAULT_BATCH_LIMIT

    @property
    def table_name(self) -> str:
        return self._config.table_name

    def _serialize(self, item: Mapping[str, Any]) -> dict[str, Any]:
        return {name: self._serializer.serialize(value) for name, value in item.items()}

    def _deserialize(self, item: Mapping[str, Any]) -> Item:
        return {name: self._deserializer.deserialize(value) for name, value in item.items()}

    def _key(self, video_id: str) -> dict[str, Any]:
        return {KEY_ATTRIBUTE: {"S": video_id}}

    def get(self, video_id: str) -> Item | None:
        try:
            response = self._client.get_item(
                TableName=self.table_name,
                Key=self._key(video_id),
            )
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, f"get {video_id}") from exc

        raw = response.get("Item")
        return self._deserialize(raw) if raw else None

    def put(self, item: Item) -> None:
        """Upsert one item, keeping ``created_at`` and ``transcribed`` if it exists."""
        video_id = item[KEY_ATTRIBUTE]
        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        clauses: list[str] = []
        for index, (name, value) in enumerate(sorted(item.items())):
            if name == KEY_ATTRIBUTE:
                continue
            names[f"#a{index}"] = name
            values[f":v{index}"] = self._serializer.serialize(value)
            if name in _PUT_IF_NOT_EXISTS:
                clauses.append(f"#a{index} = if_not_exists(#a{index}, :v{index})")
            else:
                clauses.append(f"#a{index} = :v{index}")

        request: dict[str, Any] = {
            "TableName": self.table_name,
            "Key": self._key(video_id),
        }
        if clauses:
            request["UpdateExpression"] = "SET " + ", ".join(clauses)
            request["ExpressionAttributeNames"] = names
            request["ExpressionAttributeValues"] = values

        try:
            self._client.update_item(**request)
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, f"put {video_id}") from exc

        logger.info("Saved video to DynamoDB: %s - %s", video_id, item.get("title", ""))

    def batch_write(self, items: Sequence[Item]) -> list[Item]:
        """Put up to 25 whole items with one ``BatchWriteItem`` call.

        Unlike ``put``, a ``PutRequest`` replaces the stored item, so an
        existing record's ``created_at`` and ``transcribed`` are overwritten
        with the values carried by ``items``. ``InMemoryStore.batch_write``
        keeps them instead.

        Returns:
            list[Item]: Items the service reported as unprocessed.
        """
        check_batch_size(items, self.batch_limit)
        if not items:
            return []

        requests = [{"PutRequest": {"Item": self._serialize(item)}} for item in items]
        try:
            response = self._client.batch_write_item(
                RequestItems={self.table_name: requests},
            )
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, "batch write") from exc

        unprocessed = response.get("UnprocessedItems") or {}
        return [
            self._deserialize(request["PutRequest"]["Item"])
            for request in unprocessed.get(self.table_name, [])
            if "PutRequest" in request
        ]

    def scan(self, condition: FieldEquals, cursor: Cursor | None = None) -> ScanPage:
        request: dict[str, Any] = {
            "TableName": self.table_name,
            "FilterExpression": "#f = :v",
            "ExpressionAttributeNames": {"#f": condition.field},
            "ExpressionAttributeValues": {":v": self._serializer.serialize(condition.value)},
        }
        if cursor is not None:
            request["ExclusiveStartKey"] = self._serialize(cursor)
        if self._config.page_size is not None:
            request["Limit"] = self._config.page_size

        try:
            response = self._client.scan(**request)
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, "scan") from exc

        last_key = response.get("LastEvaluatedKey")
        return ScanPage(
            items=[self._deserialize(raw) for raw in response.get("Items", [])],
            cursor=self._deserialize(last_key) if last_key else None,
        )

    def update(self, video_id: str, values: Mapping[str, Any]) -> None:
        names = {f"#a{i}": name for i, name in enumerate(values)}
        expression_values = {
            f":v{i}": self._serializer.serialize(value) for i, value in enumerate(values.values())
        }
        assignments = ", ".join(f"#a{i} = :v{i}" for i in range(len(values)))
        names["#key"] = KEY_ATTRIBUTE

        try:
            self._client.update_item(
                TableName=self.table_name,
                Key=self._key(video_id),
                UpdateExpression=f"SET {assignments}",
                ConditionExpression="attribute_exists(#key)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=expression_values,
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise RecordNotFoundError(video_id) from exc
            raise _translate(exc, f"update {video_id}") from exc
        except BotoCoreError as exc:
            raise _translate(exc, f"update {video_id}") from exc

    def describe(self) -> dict[str, Any]:
        """Return the table status and approximate item count."""
        try:
            table = self._client.describe_table(TableName=self.table_name)["Table"]
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, f"describe table {self.table_name}") from exc
        return {
            "table_name": self.table_name,
            "status": table.get("TableStatus"),
            "item_count": table.get("ItemCount", 0),
        }

    def ensure_table(self) -> bool:
        """Create the table if it does not exist and wait until it is active.

        Returns:
            bool: True if the table was created, False if it already existed.
        """
        try:
            self._client.describe_table(TableName=self.table_name)
            logger.info("Table %s already exists", self.table_name)
            return False
        except ClientError as exc:
            if _error_code(exc) != "ResourceNotFoundException":
                raise _translate(exc, f"describe table {self.table_name}") from exc
        except BotoCoreError as exc:
            raise _translate(exc, f"describe table {self.table_name}") from exc

        logger.info("Creating table %s...", self.table_name)
        try:
            self._client.create_table(
                TableName=self.table_name,
                KeySchema=[{"AttributeName": KEY_ATTRIBUTE, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": KEY_ATTRIBUTE, "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
            )
            delay = 5
            self._client.get_waiter("table_exists").wait(
                TableName=self.table_name,
                WaiterConfig={
                    "Delay": delay,
                    "MaxAttempts": max(1, math.ceil(self._config.table_wait_seconds / delay)),
                },
            )
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, f"create table {self.table_name}") from exc

        logger.info("Table %s created successfully", self.table_name)
        return True


__all__ = ["DynamoStore", "KEY_ATTRIBUTE", "TRANSIENT_ERROR_CODES"]
