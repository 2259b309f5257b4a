# =============================================================================
# lib/backends/supabase.py - Supabase Backends
# =============================================================================
# ConfigStore and StorageBackend on top of Supabase (PostgREST + Storage).
#
# Expected schema:
#   directory_config    (key text primary key, value text)
#   storage_collections (id uuid default gen_random_uuid(), name text, parent_id uuid null)
#   storage_containers  (id uuid default gen_random_uuid(), name text, collection_id uuid)
#   storage_tables      (id uuid default gen_random_uuid(), container_id uuid,
#                        name text, rows jsonb default '[[]]',
#                        version integer not null default 0)
#
# A table's rows (header first) live in one jsonb array. Every row mutation
# rewrites that array with `version = version + 1` and only matches while
# `version` is still the value it read, so concurrent writers retry instead
# of overwriting each other. Dates are stored as ISO-8601 strings.
#
# Uploaded assets go to the SUPABASE_ASSET_BUCKET storage bucket under
# "<collection_id>/<filename>" and are served by public URL.
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Any, Callable, NamedTuple, TypeVar

from app.config import settings
from app.exceptions import (
    CollectionNotFoundError,
    ContainerNotFoundError,
    RowPositionError,
    SchoolVaultException,
    StorageBackendError,
    TableNotFoundError,
)
from core.models.directory import Collection, Container
from lib.supabase_client import SupabaseClient
from lib.utils import to_json

logger = logging.getLogger(__name__)

Row = list[Any]
T = TypeVar("T")

CONFIG_TABLE = "directory_config"
COLLECTIONS_TABLE = "storage_collections"
CONTAINERS_TABLE = "storage_containers"
TABLES_TABLE = "storage_tables"

MAX_WRITE_ATTEMPTS = 5


class StoredTable(NamedTuple):
    """One storage_tables row as read, with the version it was read at."""
    id: str
    rows: list[Row]
    version: int


def _jsonable_rows(rows: list[Row]) -> list[Row]:
    """Round-trip rows through JSON so dates become ISO strings."""
    return json.loads(to_json(rows))


class SupabaseConfigStore:
    """Directory pointers in the directory_config table."""

    def __init__(self, client: Any | None = None):
        self._client = client

    @property
    def client(self) -> Any:
        return self._client or SupabaseClient.get_client()

    def get(self, key: str) -> str | None:
        try:
            response = (
                self.client.table(CONFIG_TABLE)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StorageBackendError("config get", str(e), {"key": key}) from e

        data = response.data or []
        return data[0].get("value") if data else None

    def set(self, key: str, value: str) -> None:
        try:
            self.client.table(CONFIG_TABLE).upsert({"key": key, "value": value}).execute()
        except Exception as e:
            raise StorageBackendError("config set", str(e), {"key": key}) from e

    def delete(self, key: str) -> None:
        try:
            self.client.table(CONFIG_TABLE).delete().eq("key", key).execute()
        except Exception as e:
            raise StorageBackendError("config delete", str(e), {"key": key}) from e


class SupabaseBackend:
    """
    Hierarchical storage in Supabase tables.

    Example:
        backend = SupabaseBackend()
        root = backend.find_collection("Wisdom_Heritage_Cloud_ERP")
    """

    def __init__(self, client: Any | None = None, bucket: str | None = None):
        self._client = client
        self.bucket = bucket or settings.SUPABASE_ASSET_BUCKET

    @property
    def client(self) -> Any:
        return self._client or SupabaseClient.get_client()

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    def find_collection(self, name: str, parent_id: str | None = None) -> Collection | None:
        def query():
            q = (
                self.client.table(COLLECTIONS_TABLE)
                .select("id, name, parent_id")
                .eq("name", name)
            )
            q = q.is_("parent_id", "null") if parent_id is None else q.eq("parent_id", parent_id)
            return q.limit(1).execute()

        data = self._run("find collection", query, name=name, parent_id=parent_id)
        return self._collection(data[0]) if data else None

    def create_collection(self, name: str, parent_id: str | None = None) -> Collection:
        data = self._run(
            "create collection",
            lambda: self.client.table(COLLECTIONS_TABLE)
            .insert({"name": name, "parent_id": parent_id})
            .execute(),
            name=name,
        )
        if not data:
            raise StorageBackendError("create collection", "Insert returned no data", {"name": name})
        logger.info(f"Created collection {name} ({data[0]['id']})")
        return self._collection(data[0])

    def get_collection(self, collection_id: str) -> Collection:
        data = self._run(
            "get collection",
            lambda: self.client.table(COLLECTIONS_TABLE)
            .select("id, name, parent_id")
            .eq("id", collection_id)
            .limit(1)
            .execute(),
            collection_id=collection_id,
        )
        if not data:
            raise CollectionNotFoundError(collection_id)
        return self._collection(data[0])

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def find_container(self, name: str, collection_id: str) -> Container | None:
        data = self._run(
            "find container",
            lambda: self.client.table(CONTAINERS_TABLE)
            .select("id, name, collection_id")
            .eq("name", name)
            .eq("collection_id", collection_id)
            .limit(1)
            .execute(),
            name=name,
            collection_id=collection_id,
        )
        return self._container(data[0]) if data else None

    def create_container(self, name: str, collection_id: str) -> Container:
        data = self._run(
            "create container",
            lambda: self.client.table(CONTAINERS_TABLE)
            .insert({"name": name, "collection_id": collection_id})
            .execute(),
            name=name,
        )
        if not data:
            raise StorageBackendError("create container", "Insert returned no data", {"name": name})
        logger.info(f"Created container {name} ({data[0]['id']})")
        return self._container(data[0])

    def open_container(self, container_id: str) -> Container:
        data = self._run(
            "open container",
            lambda: self.client.table(CONTAINERS_TABLE)
            .select("id, name, collection_id")
            .eq("id", container_id)
            .limit(1)
            .execute(),
            container_id=container_id,
        )
        if not data:
            raise ContainerNotFoundError(container_id)
        return self._container(data[0])

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def list_tables(self, container_id: str) -> list[str]:
        data = self._run(
            "list tables",
            lambda: self.client.table(TABLES_TABLE)
            .select("name")
            .eq("container_id", container_id)
            .execute(),
            container_id=container_id,
        )
        return [row["name"] for row in data]

    def has_table(self, container_id: str, name: str) -> bool:
        return self._table_row(container_id, name) is not None

    def create_table(self, container_id: str, name: str, header: Row | None = None) -> None:
        if self.has_table(container_id, name):
            return
        rows = _jsonable_rows([list(header) if header else []])
        self._run(
            "create table",
            lambda: self.client.table(TABLES_TABLE)
            .insert({"container_id": container_id, "name": name, "rows": rows})
            .execute(),
            container_id=container_id,
            table=name,
        )
        logger.info(f"Created table {name} in container {container_id}")

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------

    def read_rows(self, container_id: str, name: str) -> list[Row]:
        return self._require_table(container_id, name).rows

    def append_row(self, container_id: str, name: str, row: Row) -> None:
        def apply(rows: list[Row]) -> None:
            rows.append(list(row))

        self._mutate(container_id, name, apply)

    def write_row(self, container_id: str, name: str, index: int, row: Row) -> None:
        def apply(rows: list[Row]) -> None:
            self._check_index(name, rows, index)
            rows[index] = list(row)

        self._mutate(container_id, name, apply)

    def delete_row(self, container_id: str, name: str, index: int) -> Row:
        def apply(rows: list[Row]) -> Row:
            self._check_index(name, rows, index)
            return rows.pop(index)

        return self._mutate(container_id, name, apply)

    def replace_rows(self, container_id: str, name: str, rows: list[Row]) -> None:
        if self._table_row(container_id, name) is None:
            self.create_table(container_id, name)
        replacement = [list(row) for row in rows]

        def apply(current: list[Row]) -> None:
            current[:] = replacement

        self._mutate(container_id, name, apply)

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
        path = f"{collection_id}/{filename}"
        try:
            bucket = self.client.storage.from_(self.bucket)
            bucket.upload(
                path=path,
                file=content,
                file_options={"content-type": mime_type, "upsert": "true"},
            )
            url = bucket.get_public_url(path)
        except Exception as e:
            raise StorageBackendError("store asset", str(e), {"path": path}) from e

        logger.info(f"Uploaded asset to storage: {path}")
        return url

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _run(self, operation: str, query, **details: Any) -> list[dict[str, Any]]:
        try:
            response = query()
        except SchoolVaultException:
            raise
        except Exception as e:
            logger.error(f"Supabase {operation} failed: {e}")
            raise StorageBackendError(operation, str(e), details) from e
        return response.data or []

    def _table_row(self, container_id: str, name: str) -> StoredTable | None:
        data = self._run(
            "read table",
            lambda: self.client.table(TABLES_TABLE)
            .select("id, rows, version")
            .eq("container_id", container_id)
            .eq("name", name)
            .limit(1)
            .execute(),
            container_id=container_id,
            table=name,
        )
        if not data:
            return None
        return StoredTable(
            id=data[0]["id"],
            rows=[list(row) for row in (data[0].get("rows") or [])],
            version=data[0].get("version") or 0,
        )

    def _require_table(self, container_id: str, name: str) -> StoredTable:
        found = self._table_row(container_id, name)
        if found is None:
            raise TableNotFoundError(container_id, name)
        return found

    def _mutate(self, container_id: str, name: str, apply: Callable[[list[Row]], T]) -> T:
        """
        Change a table's rows with an optimistic version check.

        The update only matches while the table's version is the one that
        was read. If another writer got in first it matches nothing, and the
        rows are read again and `apply` re-runs on the fresh copy.

        Raises:
            StorageBackendError: If every attempt lost to a concurrent writer
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            stored = self._require_table(container_id, name)
            result = apply(stored.rows)
            if self._save_rows(stored, name):
                return result
            logger.warning(f"Concurrent write to table {name} (attempt {attempt}), retrying")

        raise StorageBackendError(
            "write rows",
            f"Table kept changing during {MAX_WRITE_ATTEMPTS} write attempts",
            {"container_id": container_id, "table": name},
        )

    def _save_rows(self, stored: StoredTable, name: str) -> bool:
        """Conditional update; False when the version moved since the read."""
        payload = _jsonable_rows(stored.rows)
        data = self._run(
            "write rows",
            lambda: self.client.table(TABLES_TABLE)
            .update({"rows": payload, "version": stored.version + 1})
            .eq("id", stored.id)
            .eq("version", stored.version)
            .execute(),
            table=name,
        )
        return bool(data)

    @staticmethod
    def _check_index(name: str, rows: list[Row], index: int) -> None:
        if index < 1 or index >= len(rows):
            raise RowPositionError(name, index - 1, max(len(rows) - 1, 0))

    @staticmethod
    def _collection(row: dict[str, Any]) -> Collection:
        return Collection(
            id=str(row["id"]),
            name=row["name"],
            parent_id=str(row["parent_id"]) if row.get("parent_id") else None,
        )

    @staticmethod
    def _container(row: dict[str, Any]) -> Container:
        return Container(
            id=str(row["id"]),
            name=row["name"],
            collection_id=str(row["collection_id"]) if row.get("collection_id") else None,
        )
