# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# This module contains tests for:
# - Module catalogue and standard tables
# - Directory handles and pointer keys
# - Outcome envelope
# - Rollover report
# - Exception envelopes
# =============================================================================

import pytest
from pydantic import ValidationError

from app.exceptions import InvalidSessionError, LockBusyError, RowPositionError
from core.models import (
    ACTIVE_SESSION_KEY,
    MASTER_TABLES,
    STANDARD_TABLES,
    Container,
    CopyStatus,
    MasterCopyResult,
    Module,
    Outcome,
    RolloverReport,
    SessionContext,
    TableRef,
    container_key,
    folder_key,
    tables_for,
)


# =============================================================================
# Module Catalogue Tests
# =============================================================================

class TestModuleCatalogue:
    """Test the fixed module set and its standard tables."""

    def test_eleven_modules(self):
        assert len(Module) == 11

    def test_every_module_has_container_name(self):
        names = [module.container_name for module in Module]

        assert len(set(names)) == len(names)
        assert Module.DELETED_DATA.container_name == "WH_Archive_DB"

    def test_module_from_value(self):
        assert Module("FEES") is Module.FEES

    def test_master_tables(self):
        assert [(entry.module, entry.name) for entry in MASTER_TABLES] == [
            (Module.USERS, "Master"),
            (Module.STUDENTS, "Master"),
            (Module.EMPLOYEES, "Master"),
        ]

    def test_standard_table_names_unique_per_module(self):
        pairs = [(entry.module, entry.name) for entry in STANDARD_TABLES]

        assert len(set(pairs)) == len(pairs)

    def test_homework_has_no_standard_tables(self):
        assert tables_for(Module.HOMEWORK) == []

    def test_global_locks_header(self):
        (entry,) = tables_for(Module.STUDENT_ATTENDANCE)

        assert entry.header == ["Class", "Section", "Date", "By"]
        assert entry.master is False

    def test_table_catalogue_frozen(self):
        with pytest.raises(ValidationError):
            MASTER_TABLES[0].name = "Other"


# =============================================================================
# Directory Model Tests
# =============================================================================

class TestDirectoryModels:

    def test_pointer_keys(self):
        assert ACTIVE_SESSION_KEY == "active-session"
        assert container_key(Module.STUDENTS, "2025-26") == "container-id:STUDENTS:2025-26"
        assert folder_key("2025-26") == "folder-id:2025-26"

    def test_container_defaults(self):
        container = Container(id="c1", name="WH_Fees_DB")

        assert container.module is None
        assert container.session is None

    def test_table_ref_requires_name(self):
        with pytest.raises(ValidationError):
            TableRef(container_id="c1", name="")

    def test_session_context_requires_session(self):
        with pytest.raises(ValidationError):
            SessionContext(session="")

    def test_session_context_frozen(self):
        ctx = SessionContext(session="2024-25")

        with pytest.raises(ValidationError):
            ctx.session = "2025-26"


# =============================================================================
# Outcome Tests
# =============================================================================

class TestOutcome:

    def test_success(self):
        outcome = Outcome.success({"id": 1}, "Saved")

        assert outcome.model_dump() == {"ok": True, "payload": {"id": 1}, "message": "Saved"}

    def test_failure_default_message(self):
        outcome = Outcome.failure("")

        assert outcome.ok is False
        assert outcome.message == "An unknown error occurred"

    def test_message_coerced_to_string(self):
        assert Outcome(ok=True, message=None).message == ""
        assert Outcome(ok=False, message=404).message == "404"


# =============================================================================
# Rollover Report Tests
# =============================================================================

class TestRolloverReport:

    def test_partial_when_a_copy_failed(self):
        report = RolloverReport(
            old_session="2024-25",
            new_session="2025-26",
            masters=[
                MasterCopyResult(module="USERS", table="Master", status=CopyStatus.COPIED, rows=3),
                MasterCopyResult(module="STUDENTS", table="Master", status=CopyStatus.FAILED, reason="x"),
            ],
        )

        assert report.is_partial
        assert [m.module for m in report.failed] == ["STUDENTS"]

    def test_skips_are_not_failures(self):
        report = RolloverReport(
            old_session="2024-25",
            new_session="2025-26",
            masters=[MasterCopyResult(module="USERS", table="Master", status=CopyStatus.SKIPPED)],
        )

        assert not report.is_partial

    def test_json_dump(self):
        report = RolloverReport(old_session="2024-25", new_session="2025-26")

        dumped = report.model_dump(mode="json")

        assert dumped["state"] == "idle"
        assert dumped["masters"] == []


# =============================================================================
# Exception Tests
# =============================================================================

class TestExceptions:

    def test_to_dict_envelope(self):
        exc = RowPositionError("Master", 5, 3)

        body = exc.to_dict()

        assert body["ok"] is False
        assert body["payload"]["code"] == "ROW_POSITION_OUT_OF_RANGE"
        assert body["payload"]["details"] == {"table": "Master", "position": 5, "row_count": 3}
        assert "out of range" in body["message"]

    def test_lock_busy_message(self):
        exc = LockBusyError(30000)

        assert exc.message == "Database busy. Try again later."
        assert "Suggestion:" in str(exc)

    def test_invalid_session(self):
        exc = InvalidSessionError("2024-25", "Session is already active")

        assert exc.status_code == 400
        assert "already active" in exc.message
