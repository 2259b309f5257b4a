# =============================================================================
# lib/backends/protocols.py - Backend Contracts
# =============================================================================
# The two external collaborators the data-store core runs on:
#
# - ConfigStore: durable, process-wide key/value store for directory pointers
#   and the active-session pointer.
# - StorageBackend: hierarchical storage. Collections nest (root -> session
#   -> assets); containers live in a collection and hold named tables; a
#   table is a list of rows whose first row is the header.
#
# Row indexes at this level are absolute (0 is the header row).
# Backends raise ContainerNotFoundError / CollectionNotFoundError for ids that
# no longer resolve, TableNotFoundError for missing tables, and
# StorageBackendError for anything unexpected.
# =============================================================================

from typing import Any, Protocol, runtime_checkable

from core.models.directory import Collection, Container

Row = list[Any]


@runtime_checkable
class ConfigStore(Protocol):
    """Durable key/value pointers."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


@runtime_checkable
class StorageBackend(Protocol):
    """Hierarchical storage of collections, containers and tables."""

    # Collections
    def find_collection(self, name: str, parent_id: str | None = None) -> Collection | None: ...

    def create_collection(self, name: str, parent_id: str | None = None) -> Collection: ...

    def get_collection(self, collection_id: str) -> Collection: ...

    # Containers
    def find_container(self, name: str, collection_id: str) -> Container | None: ...

    def create_container(self, name: str, collection_id: str) -> Container: ...

    def open_container(self, container_id: str) -> Container: ...

    # Tables
    def list_tables(self, container_id: str) -> list[str]: ...

    def has_table(self, container_id: str, name: str) -> bool: ...

    def create_table(self, container_id: str, name: str, header: Row | None = None) -> None: ...

    # Rows
    def read_rows(self, container_id: str, name: str) -> list[Row]: ...

    def append_row(self, container_id: str, name: str, row: Row) -> None: ...

    def write_row(self, container_id: str, name: str, index: int, row: Row) -> None: ...

    def delete_row(self, container_id: str, name: str, index: int) -> Row: ...

    def replace_rows(self, container_id: str, name: str, rows: list[Row]) -> None: ...

    # Assets
    def store_asset(
        self,
        collection_id: str,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> str: ...
