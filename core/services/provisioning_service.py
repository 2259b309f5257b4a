# =============================================================================
# core/services/provisioning_service.py - Standard Table Provisioning
# =============================================================================
# Makes sure every module's container and standard tables exist in a session.
# Idempotent: existing tables and their rows are left alone.
#
# Provisioning also seeds the bootstrap administrator into USERS/Master when
# no user has that username, and keeps the ACTIVE_SESSION_YEAR property in
# USERS/Settings in step with the active-session pointer. The pointer in the
# config store stays authoritative; the Settings row is a mirror readable
# alongside the other user settings.
# =============================================================================

import logging

from app.config import settings
from core.models.module import (
    ACTIVE_SESSION_PROPERTY,
    SETTINGS_TABLE,
    STANDARD_TABLES,
    Module,
    TableSpec,
)
from core.services.directory_service import DirectoryResolver
from core.services.row_store import RowStore
from core.services.table_service import TableAccessor

logger = logging.getLogger(__name__)


def _is_users_master(entry: TableSpec) -> bool:
    return entry.module == Module.USERS and entry.master


class ProvisioningService:
    """Creates the standard table catalogue for a session."""

    def __init__(
        self,
        directory: DirectoryResolver,
        tables: TableAccessor,
        catalogue: list[TableSpec] | None = None,
        rows: RowStore | None = None,
    ):
        self.directory = directory
        self.tables = tables
        self.catalogue = STANDARD_TABLES if catalogue is None else catalogue
        self.rows = rows or RowStore(tables.backend)

    def provision(self, session: str) -> dict[str, list[str]]:
        """
        Resolve every module's container and create its standard tables.

        Returns:
            Module key -> names of its standard tables
        """
        logger.info(f"Provisioning session {session}")
        provisioned: dict[str, list[str]] = {}

        for module in Module:
            container = self.directory.resolve(module, session)
            names = []
            for entry in self.catalogue:
                if entry.module != module:
                    continue
                self.tables.get_or_create(container, entry.name, entry.header)
                names.append(entry.name)
            provisioned[module.value] = names

        users = next((entry for entry in self.catalogue if _is_users_master(entry)), None)
        if users is not None:
            self.seed_admin(session, users)

        logger.info(f"Provisioning of {session} complete")
        return provisioned

    def seed_admin(self, session: str, users: TableSpec | None = None) -> bool:
        """
        Add the bootstrap administrator to USERS/Master unless present.

        Returns:
            True if the row was added
        """
        users = users or next(entry for entry in STANDARD_TABLES if _is_users_master(entry))
        container = self.directory.resolve(Module.USERS, session)
        table = self.tables.get_or_create(container, users.name, users.header)

        username = settings.BOOTSTRAP_ADMIN_USERNAME
        if self.rows.find(table, lambda row: bool(row) and str(row[0]).strip() == username):
            return False

        self.rows.append(
            table,
            [
                username,
                settings.BOOTSTRAP_ADMIN_PASSWORD,
                settings.BOOTSTRAP_ADMIN_ROLE,
                settings.BOOTSTRAP_ADMIN_NAME,
                settings.BOOTSTRAP_ADMIN_EMPLOYEE_ID,
                "",
                "",
                "",
            ],
        )
        logger.info(f"Seeded administrator '{username}' in {session}")
        return True

    def record_active_session(self, session: str) -> None:
        """Upsert the ACTIVE_SESSION_YEAR property in the session's USERS/Settings."""
        container = self.directory.resolve(Module.USERS, session)
        header = next(
            (e.header for e in STANDARD_TABLES if e.module == Module.USERS and e.name == SETTINGS_TABLE),
            None,
        )
        table = self.tables.get_or_create(container, SETTINGS_TABLE, header)

        position = self.rows.position_of_key(table, ACTIVE_SESSION_PROPERTY)
        if position is None:
            self.rows.append(table, [ACTIVE_SESSION_PROPERTY, session])
        else:
            self.rows.update_at(table, position, [ACTIVE_SESSION_PROPERTY, session])
        logger.debug(f"{ACTIVE_SESSION_PROPERTY} set to {session}")

    def recorded_active_session(self, session: str) -> str | None:
        """ACTIVE_SESSION_YEAR as mirrored in the session's USERS/Settings, if any."""
        container = self.directory.find(Module.USERS, session)
        if container is None:
            return None
        table = self.tables.get(container, SETTINGS_TABLE)
        if table is None:
            return None
        row = self.rows.find_by_key(table, ACTIVE_SESSION_PROPERTY)
        return str(row[1]) if row and len(row) > 1 else None
