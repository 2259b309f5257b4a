# =============================================================================
# core/services/archive_service.py - Archive Log
# =============================================================================
# Append-only log of deleted rows (DELETED_DATA / Deleted_Log).
# Entries are never updated or pruned by the core.
# =============================================================================

import logging
from typing import Any

from core.models.archive import ArchiveRecord
from core.models.directory import TableRef
from core.models.module import ARCHIVE_HEADER, ARCHIVE_TABLE, Module
from core.services.directory_service import DirectoryResolver
from core.services.row_store import RowStore
from core.services.table_service import TableAccessor
from lib.utils import utc_now

logger = logging.getLogger(__name__)


class ArchiveLog:
    """
    Records snapshots of rows before they are deleted.

    Example:
        archive.record(Module.STUDENTS, "2025001", row, actor="principal", session="2025-26")
    """

    def __init__(self, directory: DirectoryResolver, tables: TableAccessor, rows: RowStore):
        self.directory = directory
        self.tables = tables
        self.rows = rows

    def _table(self, session: str) -> TableRef:
        container = self.directory.resolve(Module.DELETED_DATA, session)
        return self.tables.get_or_create(container, ARCHIVE_TABLE, ARCHIVE_HEADER)

    def record(
        self,
        module: Module | str,
        record_id: Any,
        snapshot: Any,
        actor: str | None = None,
        *,
        session: str,
    ) -> ArchiveRecord:
        """
        Append one archive entry.

        Args:
            module: Module the row came from
            record_id: Key of the row
            snapshot: The row as it was before deletion
            actor: Who deleted it (defaults to "System")
            session: Session whose archive receives the entry

        Returns:
            The entry as written
        """
        entry = ArchiveRecord(
            deleted_at=utc_now(),
            deleted_by=actor or "System",
            module=module.value if isinstance(module, Module) else str(module),
            original_id=str(record_id),
            snapshot=snapshot,
        )
        self.rows.append(self._table(session), entry.to_row())
        logger.info(f"Archived {entry.module} record {entry.original_id} (by {entry.deleted_by})")
        return entry

    def list_records(self, session: str) -> list[ArchiveRecord]:
        """Archive entries of one session, oldest first."""
        container = self.directory.find(Module.DELETED_DATA, session)
        if container is None:
            return []
        return [
            ArchiveRecord.from_row(row)
            for row in self.tables.read_all_data_rows(container, ARCHIVE_TABLE)
        ]
