"""Conversion between VideoRecord and the plain item dicts stored remotely."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from catalog_store.errors import MarshallingError
from catalog_store.models import Item, VideoRecord

_TEXT_FIELDS = ("title", "author", "duration", "description", "url")


def _format_timestamp(video_id: str, name: str, value: datetime | None) -> str:
    if value is None:
        raise MarshallingError(f"record {video_id}: {name} is not set")
    if value.tzinfo is None:
        raise MarshallingError(f"record {video_id}: {name} must be timezone-aware")
    return value.isoformat()


def _parse_timestamp(video_id: str, name: str, value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MarshallingError(f"item {video_id}: {name} is not a string")
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise MarshallingError(f"item {video_id}: invalid {name} {value!r}") from exc


def _coerce_views(video_id: str, value: Any) -> int:
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise MarshallingError(f"item {video_id}: views is not an integer")
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MarshallingError(f"item {video_id}: views is not an integer")
    if value < 0:
        raise MarshallingError(f"item {video_id}: views is negative")
    return value


def encode_record(record: VideoRecord) -> Item:
    """Marshal a stamped record into a store item.

    Args:
        record: Record with both timestamps set.

    Returns:
        Item: Plain dict with ISO-8601 timestamps.

    Raises:
        MarshallingError: If any attribute cannot be represented.
    """
    video_id = record.video_id
    if not isinstance(video_id, str) or not video_id:
        raise MarshallingError(f"invalid video_id: {video_id!r}")

    item: Item = {"video_id": video_id}
    for name in _TEXT_FIELDS:
        value = getattr(record, name)
        if not isinstance(value, str):
            raise MarshallingError(f"record {video_id}: {name} is not a string")
        item[name] = value

    if isinstance(record.views, Decimal):
        raise MarshallingError(f"record {video_id}: views is not an integer")
    item["views"] = _coerce_views(video_id, record.views)

    if not isinstance(record.transcribed, bool):
        raise MarshallingError(f"record {video_id}: transcribed is not a bool")
    item["transcribed"] = record.transcribed

    item["created_at"] = _format_timestamp(video_id, "created_at", record.created_at)
    item["updated_at"] = _format_timestamp(video_id, "updated_at", record.updated_at)
    return item


def decode_item(item: Item) -> VideoRecord:
    """Unmarshal a store item into a VideoRecord.

    Raises:
        MarshallingError: If the item has no usable key or a wrongly typed attribute.
    """
    video_id = item.get("video_id")
    if not isinstance(video_id, str) or not video_id:
        raise MarshallingError(f"item has no valid video_id: {video_id!r}")

    text: dict[str, str] = {}
    for name in _TEXT_FIELDS:
        value = item.get(name, "")
        if not isinstance(value, str):
            raise MarshallingError(f"item {video_id}: {name} is not a string")
        text[name] = value

    transcribed = item.get("transcribed", False)
    if not isinstance(transcribed, bool):
        raise MarshallingError(f"item {video_id}: transcribed is not a bool")

    return VideoRecord(
        video_id=video_id,
        views=_coerce_views(video_id, item.get("views", 0)),
        transcribed=transcribed,
        created_at=_parse_timestamp(video_id, "created_at", item.get("created_at")),
        updated_at=_parse_timestamp(video_id, "updated_at", item.get("updated_at")),
        **text,
    )


def format_timestamp(value: datetime) -> str:
    """Format a timezone-aware timestamp the way items store it."""
    return _format_timestamp("-", "timestamp", value)


__all__ = ["decode_item", "encode_record", "format_timestamp"]
