# =============================================================================
# core/datastore.py - Data-Store Wiring
# =============================================================================
# One object holding every data-store service, built on a single config store
# and storage backend. Request handlers get a Datastore, capture a
# SessionContext, and pass it to every call.
#
# Usage:
#   from core.datastore import create_datastore
#   store = create_datastore()
#   ctx = store.context()
#   master = store.table(Module.STUDENTS, "Master", ctx)
#   store.rows.append(master, [...])
# =============================================================================

import logging
from typing import Any, Sequence

from app.config import settings
from core.models.directory import SessionContext, TableRef
from core.models.module import Module
from core.services.archive_service import ArchiveLog
from core.services.cache_service import Cache, MemoryCache, cache_key, create_cache
from core.services.directory_service import DirectoryResolver
from core.services.lock_service import LockManager, create_lock_manager
from core.services.provisioning_service import ProvisioningService
from core.services.rollover_service import RolloverService
from core.services.row_store import RowStore
from core.services.table_service import TableAccessor
from core.services.upload_service import UploadService
from lib.backends.memory import MemoryBackend, MemoryConfigStore
from lib.backends.protocols import ConfigStore, StorageBackend

logger = logging.getLogger(__name__)

Row = list[Any]


class Datastore:
    """
    Facade over the data-store services.

    Attributes:
        directory: (module, session) -> container
        tables: get-or-create / read tables
        rows: keyed row operations
        cache: advisory TTL cache
        lock: critical sections
        archive: deleted-row snapshots
        provisioning: standard tables per session
        uploads: asset uploads
        rollover: academic-year transition
    """

    def __init__(
        self,
        config: ConfigStore,
        backend: StorageBackend,
        cache: Cache | None = None,
        lock: LockManager | None = None,
    ):
        self.config = config
        self.backend = backend
        self.cache = cache or MemoryCache()
        self.lock = lock or LockManager()

        self.directory = DirectoryResolver(config, backend)
        self.tables = TableAccessor(backend)
        self.rows = RowStore(backend)
        self.archive = ArchiveLog(self.directory, self.tables, self.rows)
        self.provisioning = ProvisioningService(self.directory, self.tables, rows=self.rows)
        self.uploads = UploadService(self.directory, backend)
        self.rollover = RolloverService(self.directory, self.tables, self.provisioning, self.lock)

    def context(self) -> SessionContext:
        """Capture the active session for one request."""
        return self.directory.session_context()

    def set_active_session(self, session: str) -> str:
        """
        Move the active-session pointer and mirror it into USERS/Settings.

        Returns:
            The normalized session name now active
        """
        session = self.directory.set_active_session(session)
        self.provisioning.record_active_session(session)
        return session

    def table(
        self,
        module: Module,
        name: str,
        ctx: SessionContext,
        header: Sequence[Any] | None = None,
    ) -> TableRef:
        """Get or create a table in the module's container for ctx.session."""
        container = self.directory.resolve(module, ctx.session)
        return self.tables.get_or_create(container, name, header)

    # -------------------------------------------------------------------------
    # Cached Reads
    # -------------------------------------------------------------------------

    def cached_rows(
        self,
        module: Module,
        name: str,
        ctx: SessionContext,
        ttl_seconds: int | None = None,
    ) -> list[Row]:
        """
        Data rows of a table, served from the cache when fresh.

        Cached rows come back through JSON, so dates read as ISO strings.
        """
        key = cache_key(ctx.session, module.value, name)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        container = self.directory.resolve(module, ctx.session)
        rows = self.tables.read_all_data_rows(container, name)
        self.cache.put(key, rows, ttl_seconds)
        return rows

    def invalidate(self, module: Module, name: str, ctx: SessionContext) -> None:
        """Drop the cached rows of a table after it changed."""
        self.cache.remove(cache_key(ctx.session, module.value, name))

    # -------------------------------------------------------------------------
    # Destructive Deletes
    # -------------------------------------------------------------------------

    def archive_and_delete(
        self,
        module: Module,
        name: str,
        key: Any,
        ctx: SessionContext,
        actor: str | None = None,
        column: int = 0,
    ) -> Row | None:
        """
        Delete a keyed row, archiving a snapshot first.

        If writing the archive entry fails, the row is kept.
        Run inside lock.with_lock when other writers may shift positions.

        Returns:
            The removed row, or None if no row had that key
        """
        container = self.directory.resolve(module, ctx.session)
        table = self.tables.get(container, name)
        if table is None:
            return None

        removed = self.rows.delete_by_key(
            table,
            key,
            column=column,
            before_delete=lambda row: self.archive.record(
                module, key, row, actor, session=ctx.session
            ),
        )
        if removed is not None:
            self.invalidate(module, name, ctx)
        return removed


def create_datastore() -> Datastore:
    """Datastore on the backends selected in settings."""
    if settings.STORAGE_BACKEND == "supabase":
        from lib.backends.supabase import SupabaseBackend, SupabaseConfigStore

        config: ConfigStore = SupabaseConfigStore()
        backend: StorageBackend = SupabaseBackend()
    else:
        config = MemoryConfigStore()
        backend = MemoryBackend()

    logger.info(
        f"Datastore using {settings.STORAGE_BACKEND} storage, "
        f"{settings.CACHE_BACKEND} cache, {settings.LOCK_BACKEND} lock"
    )
    return Datastore(config, backend, cache=create_cache(), lock=create_lock_manager())
