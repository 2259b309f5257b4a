# =============================================================================
# core/services/directory_service.py - Directory Resolution
# =============================================================================
# Maps (module, session) to a durable container, provisioning lazily and
# healing stale pointers.
#
# Storage layout:
#   <ROOT_COLLECTION_NAME>/
#       <SESSION_COLLECTION_PREFIX><session>/
#           <module container>   (one per module, e.g. WH_Students_DB)
#           <asset collections>  (e.g. Student_Photos)
#
# Lookups try the persisted pointer first. When the pointer is missing or no
# longer opens, the resolver walks the layout by name, creating only what is
# not there, and persists the id it ends up with. Discovery always looks by
# name before creating, so two first-time callers end up on the same
# container.
# =============================================================================

import logging

from app.config import settings
from app.exceptions import (
    CollectionNotFoundError,
    ContainerNotFoundError,
    InvalidSessionError,
)
from core.models.directory import (
    ACTIVE_SESSION_KEY,
    Collection,
    Container,
    SessionContext,
    container_key,
    folder_key,
)
from core.models.module import Module
from lib.backends.protocols import ConfigStore, StorageBackend

logger = logging.getLogger(__name__)


def normalize_session(session: str | None) -> str:
    """Strip a session label and reject empty ones."""
    value = str(session or "").strip()
    if not value:
        raise InvalidSessionError(str(session or ""))
    return value


class DirectoryResolver:
    """
    Resolves modules to containers for an explicit academic session.

    The session is always passed in. Request handlers capture it once with
    session_context() and thread it through every call, so a rollover in
    another request never changes the session a running handler writes to.

    Example:
        resolver = DirectoryResolver(config_store, backend)
        ctx = resolver.session_context()
        container = resolver.resolve(Module.STUDENTS, ctx.session)
    """

    def __init__(
        self,
        config: ConfigStore,
        backend: StorageBackend,
        default_session: str | None = None,
        root_name: str | None = None,
        session_prefix: str | None = None,
    ):
        self.config = config
        self.backend = backend
        self.default_session = default_session or settings.DEFAULT_SESSION
        self.root_name = root_name or settings.ROOT_COLLECTION_NAME
        self.session_prefix = (
            settings.SESSION_COLLECTION_PREFIX if session_prefix is None else session_prefix
        )

    # -------------------------------------------------------------------------
    # Active Session
    # -------------------------------------------------------------------------

    def get_active_session(self) -> str:
        """Persisted active session, or the configured default."""
        return self.config.get(ACTIVE_SESSION_KEY) or self.default_session

    def set_active_session(self, session: str) -> str:
        """
        Overwrite the persisted active-session pointer.

        Container handles already obtained by other callers keep pointing
        at the session they were resolved for.

        Raises:
            InvalidSessionError: If the session label is empty
        """
        session = normalize_session(session)
        self.config.set(ACTIVE_SESSION_KEY, session)
        logger.info(f"Active session set to {session}")
        return session

    def session_context(self) -> SessionContext:
        """Snapshot of the active session for one request."""
        return SessionContext(session=self.get_active_session())

    def session_folder_name(self, session: str) -> str:
        return f"{self.session_prefix}{session}"

    # -------------------------------------------------------------------------
    # Session Folders
    # -------------------------------------------------------------------------

    def get_session_folder(self, session: str) -> Collection:
        """
        Find or create the collection holding one session's containers.

        Uses the persisted folder pointer when it still resolves.
        """
        session = normalize_session(session)
        key = folder_key(session)

        folder_id = self.config.get(key)
        if folder_id:
            try:
                return self.backend.get_collection(folder_id)
            except CollectionNotFoundError:
                logger.warning(
                    f"Folder pointer for session {session} is stale ({folder_id}). Re-locating..."
                )

        root = self._find_or_create_collection(self.root_name, None)
        folder = self._find_or_create_collection(self.session_folder_name(session), root.id)

        self.config.set(key, folder.id)
        return folder

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def resolve(self, module: Module, session: str) -> Container:
        """
        Get the container for (module, session), creating it on first use.

        A stale pointer is never surfaced: the container is rediscovered by
        name (or created) and the pointer is rewritten.

        Args:
            module: Logical database
            session: Academic session label

        Returns:
            Container bound to the module and session
        """
        session = normalize_session(session)

        opened = self._open_pointer(module, session)
        if opened is not None:
            return opened

        folder = self.get_session_folder(session)
        container = self.backend.find_container(module.container_name, folder.id)
        if container is None:
            container = self.backend.create_container(module.container_name, folder.id)
            logger.info(f"Provisioned container {module.container_name} for session {session}")

        self.config.set(container_key(module, session), container.id)
        return self._bind(container, module, session)

    def find(self, module: Module, session: str) -> Container | None:
        """
        Look up the container for (module, session) without creating anything.

        Returns:
            The container, or None if the session or module was never provisioned
        """
        session = normalize_session(session)

        opened = self._open_pointer(module, session)
        if opened is not None:
            return opened

        root = self.backend.find_collection(self.root_name, None)
        if root is None:
            return None
        folder = self.backend.find_collection(self.session_folder_name(session), root.id)
        if folder is None:
            return None
        container = self.backend.find_container(module.container_name, folder.id)
        if container is None:
            return None

        self.config.set(container_key(module, session), container.id)
        return self._bind(container, module, session)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _open_pointer(self, module: Module, session: str) -> Container | None:
        container_id = self.config.get(container_key(module, session))
        if not container_id:
            return None
        try:
            return self._bind(self.backend.open_container(container_id), module, session)
        except ContainerNotFoundError:
            logger.warning(
                f"Container pointer for {module.value}/{session} is stale ({container_id}). Re-locating..."
            )
            return None

    def _find_or_create_collection(self, name: str, parent_id: str | None) -> Collection:
        collection = self.backend.find_collection(name, parent_id)
        if collection is None:
            collection = self.backend.create_collection(name, parent_id)
            logger.info(f"Created collection {name}")
        return collection

    @staticmethod
    def _bind(container: Container, module: Module, session: str) -> Container:
        return container.model_copy(update={"module": module, "session": session})
