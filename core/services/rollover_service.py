# =============================================================================
# core/services/rollover_service.py - Academic-Year Rollover
# =============================================================================
# Starts a new academic session:
#
#   1. Copy each master table (identity registries) from the old session's
#      container into the new session's container, header included.
#   2. Provision every module's standard tables in the new session; logs
#      (attendance, fees, homework, results...) start empty.
#   3. Switch the active-session pointer and mirror it into USERS/Settings.
#
# Everything runs in one critical section. Copies are staged before the
# pointer moves, so a fault in provisioning leaves the school on the old
# session. A master table that fails to copy does not stop the others; the
# rollover completes in the PARTIAL state and the report names the failure.
# The old session's containers are never modified.
# =============================================================================

import logging

from app.exceptions import InvalidSessionError
from core.models.module import MASTER_TABLES, TableSpec
from core.models.outcome import Outcome
from core.models.rollover import (
    CopyStatus,
    MasterCopyResult,
    RolloverReport,
    RolloverState,
)
from core.services.directory_service import DirectoryResolver, normalize_session
from core.services.lock_service import Busy, LockManager
from core.services.provisioning_service import ProvisioningService
from core.services.table_service import TableAccessor

logger = logging.getLogger(__name__)


class RolloverService:
    """
    Drives the transition from one academic session to the next.

    Example:
        outcome = rollover.rollover("2025-26", confirmed_by="principal")
        if outcome.ok:
            report = outcome.payload  # RolloverReport
    """

    def __init__(
        self,
        directory: DirectoryResolver,
        tables: TableAccessor,
        provisioning: ProvisioningService,
        lock: LockManager,
        masters: list[TableSpec] | None = None,
    ):
        self.directory = directory
        self.tables = tables
        self.provisioning = provisioning
        self.lock = lock
        self.masters = MASTER_TABLES if masters is None else masters

    def rollover(
        self,
        new_session: str,
        confirmed_by: str | None = None,
        timeout_ms: int | None = None,
    ) -> Outcome:
        """
        Switch to `new_session`, carrying master data forward.

        Returns:
            Outcome whose payload is the RolloverReport on success.
            ok=False if the lock was busy or the target session is invalid.
        """
        try:
            result = self.lock.with_lock(
                lambda: self._run(new_session, confirmed_by),
                timeout_ms,
            )
        except InvalidSessionError as e:
            return Outcome.failure(e.message, payload={"code": e.code})

        if isinstance(result, Busy):
            return Outcome.failure(result.message, payload={"code": "LOCK_BUSY"})
        return result

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _run(self, new_session: str, confirmed_by: str | None) -> Outcome:
        new_session = normalize_session(new_session)
        old_session = self.directory.get_active_session()
        if new_session == old_session:
            raise InvalidSessionError(new_session, "Session is already active")

        report = RolloverReport(
            old_session=old_session,
            new_session=new_session,
            confirmed_by=confirmed_by,
        )
        logger.info(f"Transitioning from {old_session} to {new_session}...")

        for entry in self.masters:
            report.masters.append(self._copy_master(entry, old_session, new_session))
        report.state = RolloverState.MASTERS_COPIED

        report.provisioned = self.provisioning.provision(new_session)
        report.state = RolloverState.LOGS_REPROVISIONED

        self.directory.set_active_session(new_session)
        self.provisioning.record_active_session(new_session)
        report.state = RolloverState.POINTER_SWITCHED

        report.folder = self.directory.get_session_folder(new_session)

        if report.is_partial:
            report.state = RolloverState.PARTIAL
            failed = ", ".join(f"{m.module}/{m.table}" for m in report.failed)
            message = f"Switched to {new_session}, but these master tables were not copied: {failed}"
            logger.error(message)
        else:
            report.state = RolloverState.DONE
            message = f"Successfully switched to {new_session}."
            logger.info(message)

        return Outcome.success(report, message)

    def _copy_master(self, entry: TableSpec, old_session: str, new_session: str) -> MasterCopyResult:
        """Copy one master table forward; faults are reported, not raised."""
        result = MasterCopyResult(
            module=entry.module.value,
            table=entry.name,
            status=CopyStatus.SKIPPED,
        )

        try:
            source = self.directory.find(entry.module, old_session)
            if source is None:
                result.reason = f"No {entry.module.value} container in {old_session}"
                return result

            source_table = self.tables.get(source, entry.name)
            if source_table is None:
                result.reason = f"No {entry.name} table in {old_session}"
                return result

            rows = self.tables.read_rows(source_table)
            if not rows:
                result.reason = f"{entry.name} table in {old_session} is empty"
                return result

            target = self.directory.resolve(entry.module, new_session)
            target_table = self.tables.get_or_create(target, entry.name, entry.header)
            self.tables.replace_rows(target_table, rows)

        except Exception as e:
            logger.error(f"Failed to copy {entry.module.value}/{entry.name}: {e}")
            result.status = CopyStatus.FAILED
            result.reason = str(e)
            return result

        result.status = CopyStatus.COPIED
        result.rows = len(rows) - 1
        logger.info(f"Copied {result.rows} rows of {entry.module.value}/{entry.name} to {new_session}")
        return result
