# =============================================================================
# lib/backends/memory.py - In-Process Backends
# =============================================================================
# Dictionary-backed ConfigStore and StorageBackend.
#
# Used for local development (STORAGE_BACKEND=memory) and by the test suite.
# Every read returns copies so callers can never mutate stored rows in place,
# and every mutation happens under one re-entrant lock so a row rewrite is
# never observed half-applied.
# =============================================================================

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from app.exceptions import (
    CollectionNotFoundError,
    ContainerNotFoundError,
    RowPositionError,
    TableNotFoundError,
)
from core.models.directory import Collection, Container

logger = logging.getLogger(__name__)

Row = list[Any]


class MemoryConfigStore:
    """Key/value pointers held in a dict."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)


@dataclass
class _StoredContainer:
    id: str
    name: str
    collection_id: str
    tables: dict[str, list[Row]] = field(default_factory=dict)


class MemoryBackend:
    """
    Hierarchical storage held in process memory.

    Example:
        backend = MemoryBackend()
        root = backend.create_collection("Wisdom_Heritage_Cloud_ERP")
        container = backend.create_container("WH_Students_DB", root.id)
        backend.create_table(container.id, "Master", ["Admission No", "Name"])
    """

    def __init__(self) -> None:
        self._collections: dict[str, Collection] = {}
        self._containers: dict[str, _StoredContainer] = {}
        self._assets: dict[str, tuple[str, bytes, str]] = {}
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    def find_collection(self, name: str, parent_id: str | None = None) -> Collection | None:
        with self._lock:
            for collection in self._collections.values():
                if collection.name == name and collection.parent_id == parent_id:
                    return collection
            return None

    def create_collection(self, name: str, parent_id: str | None = None) -> Collection:
        with self._lock:
            if parent_id is not None and parent_id not in self._collections:
                raise CollectionNotFoundError(parent_id)
            collection_id = uuid4().hex
            collection = Collection(
                id=collection_id,
                name=name,
                parent_id=parent_id,
                url=f"memory://collections/{collection_id}",
            )
            self._collections[collection_id] = collection
            logger.debug(f"Created collection {name} ({collection_id})")
            return collection

    def get_collection(self, collection_id: str) -> Collection:
        with self._lock:
            collection = self._collections.get(collection_id)
            if collection is None:
                raise CollectionNotFoundError(collection_id)
            return collection

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def find_container(self, name: str, collection_id: str) -> Container | None:
        with self._lock:
            for stored in self._containers.values():
                if stored.name == name and stored.collection_id == collection_id:
                    return self._handle(stored)
            return None

    def create_container(self, name: str, collection_id: str) -> Container:
        with self._lock:
            if collection_id not in self._collections:
                raise CollectionNotFoundError(collection_id)
            stored = _StoredContainer(id=uuid4().hex, name=name, collection_id=collection_id)
            self._containers[stored.id] = stored
            logger.debug(f"Created container {name} ({stored.id})")
            return self._handle(stored)

    def open_container(self, container_id: str) -> Container:
        with self._lock:
            return self._handle(self._container(container_id))

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def list_tables(self, container_id: str) -> list[str]:
        with self._lock:
            return list(self._container(container_id).tables)

    def has_table(self, container_id: str, name: str) -> bool:
        with self._lock:
            return name in self._container(container_id).tables

    def create_table(self, container_id: str, name: str, header: Row | None = None) -> None:
        with self._lock:
            tables = self._container(container_id).tables
            if name in tables:
                return
            # A headerless table still gets an empty header row at index 0
            tables[name] = [list(header) if header else []]

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------

    def read_rows(self, container_id: str, name: str) -> list[Row]:
        with self._lock:
            return [list(row) for row in self._rows(container_id, name)]

    def append_row(self, container_id: str, name: str, row: Row) -> None:
        with self._lock:
            self._rows(container_id, name).append(list(row))

    def write_row(self, container_id: str, name: str, index: int, row: Row) -> None:
        with self._lock:
            rows = self._rows(container_id, name)
            self._check_index(name, rows, index)
            rows[index] = list(row)

    def delete_row(self, container_id: str, name: str, index: int) -> Row:
        with self._lock:
            rows = self._rows(container_id, name)
            self._check_index(name, rows, index)
            return rows.pop(index)

    def replace_rows(self, container_id: str, name: str, rows: list[Row]) -> None:
        with self._lock:
            tables = self._container(container_id).tables
            tables[name] = [list(row) for row in rows]

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    def store_asset(
        self,
        collection_id: str,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> str:
        with self._lock:
            if collection_id not in self._collections:
                raise CollectionNotFoundError(collection_id)
            asset_id = uuid4().hex
            self._assets[asset_id] = (filename, bytes(content), mime_type)
            return f"memory://assets/{asset_id}/{filename}"

    def read_asset(self, url: str) -> bytes | None:
        asset_id = url.removeprefix("memory://assets/").split("/", 1)[0]
        with self._lock:
            asset = self._assets.get(asset_id)
            return asset[1] if asset else None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _container(self, container_id: str) -> _StoredContainer:
        stored = self._containers.get(container_id)
        if stored is None:
            raise ContainerNotFoundError(container_id)
        return stored

    def _rows(self, container_id: str, name: str) -> list[Row]:
        rows = self._container(container_id).tables.get(name)
        if rows is None:
            raise TableNotFoundError(container_id, name)
        return rows

    @staticmethod
    def _check_index(name: str, rows: list[Row], index: int) -> None:
        # Absolute index 0 is the header; data rows start at 1
        if index < 1 or index >= len(rows):
            raise RowPositionError(name, index - 1, max(len(rows) - 1, 0))

    @staticmethod
    def _handle(stored: _StoredContainer) -> Container:
        return Container(id=stored.id, name=stored.name, collection_id=stored.collection_id)
