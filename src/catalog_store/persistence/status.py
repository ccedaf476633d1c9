"""Single-field transcription status updates."""

from __future__ import annotations

import logging
from datetime import datetime

from catalog_store.codec import format_timestamp
from catalog_store.models import Clock, utc_now
from catalog_store.store.base import StoreClient

logger = logging.getLogger(__name__)


class StatusUpdater:
    """Sets the ``transcribed`` flag on one stored record.

    Only ``transcribed`` and ``updated_at`` are written, conditionally on the
    record existing; the rest of the record is never read or rewritten.
    Errors are raised to the caller as-is and never retried.
    """

    def __init__(self, store: StoreClient, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utc_now

    def set_transcribed(self, video_id: str, value: bool) -> datetime:
        """Set the transcription flag.

        Args:
            video_id: Key of the record to update.
            value: New flag value.

        Returns:
            datetime: The ``updated_at`` written alongside the flag.

        Raises:
            RecordNotFoundError: If no record has this key.
            StoreError: If the store rejected the update.
        """
        now = self._clock()
        self._store.update(
            video_id,
            {"transcribed": bool(value), "updated_at": format_timestamp(now)},
        )
        logger.info("Updated transcribe status for video %s to %s", video_id, value)
        return now


__all__ = ["StatusUpdater"]
