# =============================================================================
# core/models/archive.py - Archive Record Schema
# =============================================================================
# One immutable entry in the archive log, written before a destructive delete.
# Stored as a row: DeletedAt, DeletedBy, Module, OriginalID, Data_JSON
# =============================================================================

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from lib.utils import to_json


class ArchiveRecord(BaseModel):
    """
    Snapshot of a deleted row.

    Example:
        {
            "deleted_at": "2025-03-01T09:12:00+00:00",
            "deleted_by": "principal",
            "module": "STUDENTS",
            "original_id": "2025001",
            "snapshot": ["2025001", "12", "Asha", ...]
        }
    """

    deleted_at: datetime = Field(..., description="When the row was archived")
    deleted_by: str = Field(default="System", description="Who deleted the row")
    module: str = Field(..., description="Module the row was deleted from")
    original_id: str = Field(..., description="Key of the deleted row")
    snapshot: Any = Field(default=None, description="The row as it was before deletion")

    def to_row(self) -> list[Any]:
        return [
            self.deleted_at,
            self.deleted_by,
            self.module,
            self.original_id,
            to_json(self.snapshot),
        ]

    @classmethod
    def from_row(cls, row: list[Any]) -> "ArchiveRecord":
        """Create ArchiveRecord from an archive table row."""
        deleted_at, deleted_by, module, original_id, data_json = (list(row) + [None] * 5)[:5]

        if isinstance(deleted_at, str):
            deleted_at = datetime.fromisoformat(deleted_at.replace("Z", "+00:00"))

        try:
            snapshot = json.loads(data_json) if data_json else None
        except (TypeError, ValueError):
            snapshot = data_json

        return cls(
            deleted_at=deleted_at,
            deleted_by=str(deleted_by or "System"),
            module=str(module or ""),
            original_id=str(original_id or ""),
            snapshot=snapshot,
        )
