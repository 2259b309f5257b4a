# =============================================================================
# core/services/table_service.py - Table Access
# =============================================================================
# Get-or-create named tables inside a container and read them back.
# A missing table reads as empty; absence is a valid state, not an error.
# =============================================================================

import io
import logging
from typing import Any, Sequence

import pandas as pd

from core.models.directory import Container, TableRef
from lib.backends.protocols import StorageBackend

logger = logging.getLogger(__name__)

Row = list[Any]


class TableAccessor:
    """
    Named tables within a container.

    Example:
        accessor = TableAccessor(backend)
        master = accessor.get_or_create(container, "Master", ["Admission No", "Name"])
        rows = accessor.read_all_data_rows(container, "Master")
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def get(self, container: Container, name: str) -> TableRef | None:
        """Existing table, or None."""
        if not self.backend.has_table(container.id, name):
            return None
        return TableRef(container_id=container.id, name=name)

    def get_or_create(
        self,
        container: Container,
        name: str,
        header: Sequence[Any] | None = None,
    ) -> TableRef:
        """
        Return the named table, creating it with `header` as row 1 if missing.

        Without a header the table starts with an empty header row, so the
        first appended row is always data.

        An existing table is returned untouched, even if its header differs.
        """
        if not self.backend.has_table(container.id, name):
            self.backend.create_table(container.id, name, list(header) if header else None)
            logger.info(f"Created table {name} in {container.name}")
        return TableRef(container_id=container.id, name=name)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def read_rows(self, table: TableRef) -> list[Row]:
        """All rows of an existing table, header included."""
        return self.backend.read_rows(table.container_id, table.name)

    def read_all_data_rows(self, container: Container, name: str) -> list[Row]:
        """Data rows without the header; [] if the table does not exist."""
        table = self.get(container, name)
        if table is None:
            return []
        rows = self.read_rows(table)
        return rows[1:] if len(rows) > 1 else []

    def read_header(self, container: Container, name: str) -> Row:
        table = self.get(container, name)
        if table is None:
            return []
        rows = self.read_rows(table)
        return rows[0] if rows else []

    def replace_rows(self, table: TableRef, rows: list[Row]) -> None:
        """Overwrite the whole table, header included."""
        self.backend.replace_rows(table.container_id, table.name, rows)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_dataframe(self, container: Container, name: str) -> pd.DataFrame:
        """
        Load a table into a DataFrame using its header as column names.

        Rows longer than the header get generated column names; shorter
        rows are padded with None.
        """
        table = self.get(container, name)
        if table is None:
            return pd.DataFrame()

        rows = self.read_rows(table)
        if not rows:
            return pd.DataFrame()

        header = [str(col) for col in rows[0]]
        data = rows[1:]
        width = max([len(header)] + [len(row) for row in data])
        columns = header + [f"Column_{i + 1}" for i in range(len(header), width)]
        padded = [list(row) + [None] * (width - len(row)) for row in data]

        return pd.DataFrame(padded, columns=columns)

    def export_csv(self, container: Container, name: str) -> str:
        """Table contents as CSV text (header row first)."""
        df = self.to_dataframe(container, name)
        buffer = io.StringIO()
        df.to_csv(buffer, index=False)
        logger.info(f"Exported {len(df)} rows from {container.name}/{name}")
        return buffer.getvalue()
