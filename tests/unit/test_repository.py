"""Tests for VideoCatalogRepository."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from catalog_store.errors import BatchWriteError, MarshallingError, RecordNotFoundError, StoreError
from catalog_store.models import BatchWriteResult, VideoRecord
from catalog_store.persistence import BatchWriter, VideoCatalogRepository
from catalog_store.store import InMemoryStore


class TestRepositoryPointOperations:
    """Test cases for single-record save, get and flag updates."""

    def test_save_and_get_video(self, make_records, clock, fixed_now) -> None:
        repo = VideoCatalogRepository(InMemoryStore(), clock=clock)
        record = make_records(1)[0]

        saved = repo.save_video(record)
        fetched = repo.get_video(record.video_id)

        assert saved.created_at == fixed_now
        assert fetched == saved

    def test_get_missing_video(self) -> None:
        repo = VideoCatalogRepository(InMemoryStore())
        with pytest.raises(RecordNotFoundError, match="video not found: nope"):
            repo.get_video("nope")

    def test_save_invalid_video(self) -> None:
        repo = VideoCatalogRepository(InMemoryStore())
        with pytest.raises(MarshallingError):
            repo.save_video(VideoRecord(video_id="abc", views=-5))

    def test_status_queries(self, make_records, clock) -> None:
        repo = VideoCatalogRepository(InMemoryStore(page_size=2), clock=clock)
        records = make_records(5)
        repo.save_videos(records)

        repo.set_transcribed(records[1].video_id)
        repo.set_transcribed(records[3].video_id, True)

        transcribed = repo.get_transcribed_videos()
        untranscribed = repo.get_untranscribed_videos()
        assert [r.video_id for r in transcribed] == ["vid0001", "vid0003"]
        assert [r.video_id for r in untranscribed] == ["vid0000", "vid0002", "vid0004"]

    def test_resave_does_not_clobber_flag(self, make_records, clock) -> None:
        """Re-persisting catalog data keeps a flag set through the status path."""
        repo = VideoCatalogRepository(InMemoryStore(), clock=clock)
        record = make_records(1)[0]
        repo.save_videos([record])
        repo.set_transcribed(record.video_id)

        repo.save_videos([record])

        assert repo.get_video(record.video_id).transcribed is True


class TestRepositoryBulkSave:
    """Test cases for save_videos and its fallback."""

    def test_empty_input(self) -> None:
        writer = MagicMock(spec=BatchWriter)
        repo = VideoCatalogRepository(InMemoryStore(), writer=writer)

        result = repo.save_videos([])

        assert result.total == 0
        writer.save_all.assert_not_called()

    def test_uses_advanced_writer(self, make_records) -> None:
        records = make_records(3)
        writer = MagicMock(spec=BatchWriter)
        writer.save_all.return_value = BatchWriteResult(total=3, processed=3, failed=0)
        fallback = MagicMock(spec=BatchWriter)
        repo = VideoCatalogRepository(InMemoryStore(), writer=writer, fallback_writer=fallback)

        result = repo.save_videos(records)

        assert result.processed == 3
        writer.save_all.assert_called_once_with(records)
        fallback.save_all.assert_not_called()

    def test_falls_back_once_on_whole_call_failure(self, make_records) -> None:
        records = make_records(3)
        writer = MagicMock(spec=BatchWriter)
        writer.save_all.side_effect = StoreError("malformed payload")
        fallback = MagicMock(spec=BatchWriter)
        fallback.save_all.return_value = BatchWriteResult(total=3, processed=3, failed=0)
        repo = VideoCatalogRepository(InMemoryStore(), writer=writer, fallback_writer=fallback)

        result = repo.save_videos(records)

        assert result.ok
        fallback.save_all.assert_called_once_with(records)

    def test_fallback_failure_propagates(self, make_records) -> None:
        writer = MagicMock(spec=BatchWriter)
        writer.save_all.side_effect = StoreError("malformed payload")
        fallback = MagicMock(spec=BatchWriter)
        fallback.save_all.side_effect = StoreError("still malformed")
        repo = VideoCatalogRepository(InMemoryStore(), writer=writer, fallback_writer=fallback)

        with pytest.raises(StoreError, match="still malformed"):
            repo.save_videos(make_records(2))

        assert fallback.save_all.call_count == 1

    def test_programming_error_does_not_trigger_fallback(self, make_records) -> None:
        """Only store failures and rejected batches are retried under the simple policy."""
        writer = MagicMock(spec=BatchWriter)
        writer.save_all.side_effect = TypeError("unexpected argument")
        fallback = MagicMock(spec=BatchWriter)
        repo = VideoCatalogRepository(InMemoryStore(), writer=writer, fallback_writer=fallback)

        with pytest.raises(TypeError, match="unexpected argument"):
            repo.save_videos(make_records(2))

        fallback.save_all.assert_not_called()

    def test_oversized_batch_triggers_fallback(self, make_records) -> None:
        records = make_records(2)
        writer = MagicMock(spec=BatchWriter)
        writer.save_all.side_effect = ValueError("batch of 30 items exceeds the store limit of 25")
        fallback = MagicMock(spec=BatchWriter)
        fallback.save_all.return_value = BatchWriteResult(total=2, processed=2, failed=0)
        repo = VideoCatalogRepository(InMemoryStore(), writer=writer, fallback_writer=fallback)

        assert repo.save_videos(records).ok
        fallback.save_all.assert_called_once_with(records)

    def test_partial_failure_raises_after_all_chunks(self, make_records) -> None:
        failed = BatchWriteResult(total=3, processed=2, failed=1, failed_ids=("vid0001",))
        writer = MagicMock(spec=BatchWriter)
        writer.save_all.return_value = failed
        fallback = MagicMock(spec=BatchWriter)
        repo = VideoCatalogRepository(InMemoryStore(), writer=writer, fallback_writer=fallback)

        with pytest.raises(BatchWriteError) as exc_info:
            repo.save_videos(make_records(3))

        assert exc_info.value.result.failed_ids == ("vid0001",)
        fallback.save_all.assert_not_called()


class TestRepositoryMaintenance:
    """Test cases for table management and connection checks."""

    def test_ensure_table_without_support(self) -> None:
        assert VideoCatalogRepository(InMemoryStore()).ensure_table() is False

    def test_ensure_table_delegates(self) -> None:
        store = MagicMock()
        store.ensure_table.return_value = True
        assert VideoCatalogRepository(store).ensure_table() is True

    def test_check_connection_round_trip(self, clock, fixed_now) -> None:
        store = InMemoryStore()
        details = VideoCatalogRepository(store, clock=clock).check_connection()

        expected_id = f"test_{int(fixed_now.timestamp())}"
        assert details["test_video_id"] == expected_id
        assert store.get(expected_id)["title"] == "Test Video"
