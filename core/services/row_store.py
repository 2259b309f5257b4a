# =============================================================================
# core/services/row_store.py - Row Store Operations
# =============================================================================
# Keyed find/append/update/delete over a table by linear scan.
#
# Positions are 0-based indexes into the data rows; the header is not
# addressable. Positions shift after a delete, so a position is only valid
# until the next delete on the same table.
#
# Uniqueness of key columns is not enforced here. Callers check it and
# write under LockManager when a duplicate would matter.
# =============================================================================

import logging
from typing import Any, Callable

from app.exceptions import RowPositionError
from core.models.directory import TableRef
from lib.backends.protocols import StorageBackend

logger = logging.getLogger(__name__)

Row = list[Any]
Predicate = Callable[[Row], bool]

# Absolute row index of the first data row (index 0 is the header)
_FIRST_DATA_ROW = 1


def key_matches(key: Any, column: int = 0) -> Predicate:
    """Predicate comparing one column to a key as strings."""
    wanted = str(key)

    def predicate(row: Row) -> bool:
        return len(row) > column and str(row[column]) == wanted

    return predicate


class RowStore:
    """
    Row-level operations on a table.

    Example:
        store = RowStore(backend)
        store.append(master, ["2025001", "Asha"])
        row = store.find_by_key(master, "2025001")
        pos = store.position_of_key(master, "2025001")
        store.update_at(master, pos, ["2025001", "Asha K"])
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def rows(self, table: TableRef) -> list[Row]:
        """Data rows in row order."""
        return self.backend.read_rows(table.container_id, table.name)[_FIRST_DATA_ROW:]

    def count(self, table: TableRef) -> int:
        return len(self.rows(table))

    def find(self, table: TableRef, predicate: Predicate) -> Row | None:
        """First data row matching `predicate`, or None."""
        for row in self.rows(table):
            if predicate(row):
                return row
        return None

    def find_position(self, table: TableRef, predicate: Predicate) -> int | None:
        """Position of the first data row matching `predicate`, or None."""
        for position, row in enumerate(self.rows(table)):
            if predicate(row):
                return position
        return None

    def find_by_key(self, table: TableRef, key: Any, column: int = 0) -> Row | None:
        return self.find(table, key_matches(key, column))

    def position_of_key(self, table: TableRef, key: Any, column: int = 0) -> int | None:
        return self.find_position(table, key_matches(key, column))

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def append(self, table: TableRef, row: Row) -> None:
        """Add a row after the last one."""
        self.backend.append_row(table.container_id, table.name, list(row))

    def update_at(self, table: TableRef, position: int, row: Row) -> None:
        """
        Overwrite the whole row at `position`.

        Raises:
            RowPositionError: If position is not a current data row
        """
        self._check_position(table, position)
        self.backend.write_row(table.container_id, table.name, position + _FIRST_DATA_ROW, list(row))

    def delete_at(self, table: TableRef, position: int) -> Row:
        """
        Remove the row at `position`; later rows move up by one.

        Returns:
            The removed row

        Raises:
            RowPositionError: If position is not a current data row
        """
        self._check_position(table, position)
        removed = self.backend.delete_row(table.container_id, table.name, position + _FIRST_DATA_ROW)
        logger.debug(f"Deleted row {position} from {table.name}")
        return removed

    def delete_by_key(
        self,
        table: TableRef,
        key: Any,
        column: int = 0,
        before_delete: Callable[[Row], Any] | None = None,
    ) -> Row | None:
        """
        Delete the first row whose `column` equals `key`.

        `before_delete` receives the row before it is removed (used to
        write the archive snapshot). If it raises, nothing is deleted.

        Returns:
            The removed row, or None if no row matched
        """
        position = self.position_of_key(table, key, column)
        if position is None:
            return None

        row = self.rows(table)[position]
        if before_delete is not None:
            before_delete(row)
        return self.delete_at(table, position)

    # -------------------------------------------------------------------------
    # Identifiers
    # -------------------------------------------------------------------------

    def next_sequence_id(
        self,
        table: TableRef,
        prefix: str,
        width: int = 3,
        column: int = 0,
    ) -> str:
        """
        Next identifier of the form <prefix><zero-padded number>.

        Scans keys starting with `prefix` and numeric afterwards; the
        result is one more than the highest. Hold the lock between this
        call and the append that uses the identifier.

        Example:
            # keys 2025001, 2025007, 2024099
            next_sequence_id(master, "2025")  # "2025008"
        """
        highest = 0
        for row in self.rows(table):
            if len(row) <= column:
                continue
            value = str(row[column])
            if not value.startswith(prefix):
                continue
            suffix = value[len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{prefix}{str(highest + 1).zfill(width)}"

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_position(self, table: TableRef, position: int) -> None:
        count = self.count(table)
        if position < 0 or position >= count:
            raise RowPositionError(table.name, position, count)
