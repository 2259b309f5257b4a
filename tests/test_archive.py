# =============================================================================
# tests/test_archive.py - Archive Log Tests
# =============================================================================
# This module contains tests for:
# - ArchiveRecord row conversion
# - Appending snapshots to the session's archive container
# - Archive-then-delete through the Datastore
# =============================================================================

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from core.models.archive import ArchiveRecord
from core.models.module import ARCHIVE_HEADER, ARCHIVE_TABLE, Module


# =============================================================================
# ArchiveRecord Tests
# =============================================================================

class TestArchiveRecord:
    """Test archive row conversion."""

    def test_to_row(self):
        record = ArchiveRecord(
            deleted_at=datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc),
            deleted_by="principal",
            module="STUDENTS",
            original_id="2024001",
            snapshot=["2024001", "Asha"],
        )

        row = record.to_row()

        assert row[1:] == ["principal", "STUDENTS", "2024001", '["2024001","Asha"]']

    def test_from_row_parses_iso_date(self):
        row = ["2025-03-01T09:00:00Z", "System", "FEES", "R-1", '{"amount":500}']

        record = ArchiveRecord.from_row(row)

        assert record.deleted_at == datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
        assert record.snapshot == {"amount": 500}

    def test_from_row_keeps_invalid_json_as_text(self):
        record = ArchiveRecord.from_row(["2025-03-01T09:00:00+00:00", "", "FEES", "R-1", "not json"])

        assert record.snapshot == "not json"
        assert record.deleted_by == "System"

    def test_from_short_row(self):
        record = ArchiveRecord.from_row(["2025-03-01T09:00:00+00:00"])

        assert record.module == ""
        assert record.snapshot is None


# =============================================================================
# ArchiveLog Tests
# =============================================================================

class TestArchiveLog:
    """Test recording and listing archive entries."""

    def test_record_creates_archive_table(self, datastore):
        datastore.archive.record(Module.STUDENTS, "2024001", ["2024001", "Asha"], session="2024-25")

        container = datastore.directory.find(Module.DELETED_DATA, "2024-25")
        assert container.name == "WH_Archive_DB"
        assert datastore.tables.read_header(container, ARCHIVE_TABLE) == ARCHIVE_HEADER

    def test_record_defaults_actor_to_system(self, datastore):
        entry = datastore.archive.record(Module.FEES, "R-7", {"amount": 100}, session="2024-25")

        assert entry.deleted_by == "System"
        assert entry.module == "FEES"

    def test_list_records_oldest_first(self, datastore):
        datastore.archive.record(Module.STUDENTS, "1", ["1"], "clerk", session="2024-25")
        datastore.archive.record(Module.EMPLOYEES, "E1", ["E1"], "admin", session="2024-25")

        records = datastore.archive.list_records("2024-25")

        assert [r.original_id for r in records] == ["1", "E1"]
        assert records[0].deleted_by == "clerk"
        assert records[1].snapshot == ["E1"]

    def test_list_records_of_unknown_session(self, datastore):
        assert datastore.archive.list_records("1999-00") == []

    def test_archives_are_per_session(self, datastore):
        datastore.archive.record(Module.STUDENTS, "1", ["1"], session="2024-25")

        assert datastore.archive.list_records("2025-26") == []


# =============================================================================
# Archive-and-Delete Tests
# =============================================================================

class TestArchiveAndDelete:
    """Test destructive deletes that snapshot first."""

    @pytest.fixture
    def master(self, datastore, student_header, student_rows):
        ctx = datastore.context()
        table = datastore.table(Module.STUDENTS, "Master", ctx, student_header)
        for row in student_rows:
            datastore.rows.append(table, row)
        return table

    def test_deletes_and_archives(self, datastore, master):
        ctx = datastore.context()

        removed = datastore.archive_and_delete(Module.STUDENTS, "Master", "2024002", ctx, actor="principal")

        assert removed[1] == "Ravi"
        assert datastore.rows.find_by_key(master, "2024002") is None
        records = datastore.archive.list_records(ctx.session)
        assert len(records) == 1
        assert records[0].original_id == "2024002"
        assert records[0].snapshot == ["2024002", "Ravi", "10", "B"]

    def test_missing_key_archives_nothing(self, datastore, master):
        ctx = datastore.context()

        assert datastore.archive_and_delete(Module.STUDENTS, "Master", "nope", ctx) is None
        assert datastore.archive.list_records(ctx.session) == []

    def test_missing_table(self, datastore):
        assert datastore.archive_and_delete(Module.FEES, "Nope", "1", datastore.context()) is None

    def test_archive_failure_keeps_row(self, datastore, master):
        ctx = datastore.context()

        with patch.object(datastore.archive, "record", side_effect=RuntimeError("archive down")):
            with pytest.raises(RuntimeError):
                datastore.archive_and_delete(Module.STUDENTS, "Master", "2024001", ctx)

        assert datastore.rows.count(master) == 3

    def test_delete_invalidates_cache(self, datastore, master):
        ctx = datastore.context()
        assert len(datastore.cached_rows(Module.STUDENTS, "Master", ctx)) == 3

        datastore.archive_and_delete(Module.STUDENTS, "Master", "2024001", ctx)

        assert len(datastore.cached_rows(Module.STUDENTS, "Master", ctx)) == 2
