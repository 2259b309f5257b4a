# =============================================================================
# core/models/rollover.py - Academic-Year Rollover Schemas
# =============================================================================
# State machine and report for the session rollover:
#
#   IDLE -> MASTERS_COPIED -> LOGS_REPROVISIONED -> POINTER_SWITCHED -> DONE
#                                                                   \-> PARTIAL
#
# PARTIAL means the pointer switched but at least one master table failed
# to copy; the report says which.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field

from .directory import Collection


class RolloverState(str, Enum):
    """Progress of one rollover run."""
    IDLE = "idle"
    MASTERS_COPIED = "masters_copied"
    LOGS_REPROVISIONED = "logs_reprovisioned"
    POINTER_SWITCHED = "pointer_switched"
    DONE = "done"
    PARTIAL = "partial"


class CopyStatus(str, Enum):
    COPIED = "copied"
    SKIPPED = "skipped"
    FAILED = "failed"


class MasterCopyResult(BaseModel):
    """Outcome of copying one master table forward."""

    module: str
    table: str
    status: CopyStatus
    rows: int = Field(default=0, ge=0, description="Data rows copied (header excluded)")
    reason: str = Field(default="", description="Why the table was skipped or failed")


class RolloverReport(BaseModel):
    """
    Everything a rollover did.

    Example:
        {
            "old_session": "2024-25",
            "new_session": "2025-26",
            "state": "done",
            "masters": [{"module": "STUDENTS", "table": "Master", "status": "copied", "rows": 120}],
            "provisioned": {"FEES": ["Collection_Log"], ...}
        }
    """

    old_session: str
    new_session: str
    state: RolloverState = RolloverState.IDLE
    masters: list[MasterCopyResult] = Field(default_factory=list)
    provisioned: dict[str, list[str]] = Field(default_factory=dict)
    folder: Collection | None = None
    confirmed_by: str | None = None

    @property
    def failed(self) -> list[MasterCopyResult]:
        return [m for m in self.masters if m.status == CopyStatus.FAILED]

    @property
    def is_partial(self) -> bool:
        return bool(self.failed)
