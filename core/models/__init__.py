# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains the schemas shared by the data-store services:
# - module.py: Module enum and the standard table catalogue
# - directory.py: Collection / Container / TableRef handles and pointer keys
# - outcome.py: The {ok, payload, message} envelope
# - archive.py: Archive log entries
# - rollover.py: Academic-year rollover state machine and report
# =============================================================================

# -----------------------------------------------------------------------------
# Module Catalogue
# -----------------------------------------------------------------------------
from .module import (
    ARCHIVE_HEADER,
    ARCHIVE_TABLE,
    ACTIVE_SESSION_PROPERTY,
    MASTER_TABLES,
    SETTINGS_TABLE,
    STANDARD_TABLES,
    Module,
    TableSpec,
    tables_for,
)

# -----------------------------------------------------------------------------
# Directory Handles
# -----------------------------------------------------------------------------
from .directory import (
    ACTIVE_SESSION_KEY,
    Collection,
    Container,
    DirectoryEntry,
    SessionContext,
    TableRef,
    container_key,
    folder_key,
)

# -----------------------------------------------------------------------------
# Envelopes and Records
# -----------------------------------------------------------------------------
from .outcome import Outcome
from .archive import ArchiveRecord
from .rollover import (
    CopyStatus,
    MasterCopyResult,
    RolloverReport,
    RolloverState,
)

__all__ = [
    # Module
    "ARCHIVE_HEADER",
    "ARCHIVE_TABLE",
    "ACTIVE_SESSION_PROPERTY",
    "MASTER_TABLES",
    "SETTINGS_TABLE",
    "STANDARD_TABLES",
    "Module",
    "TableSpec",
    "tables_for",
    # Directory
    "ACTIVE_SESSION_KEY",
    "Collection",
    "Container",
    "DirectoryEntry",
    "SessionContext",
    "TableRef",
    "container_key",
    "folder_key",
    # Envelopes
    "Outcome",
    "ArchiveRecord",
    # Rollover
    "CopyStatus",
    "MasterCopyResult",
    "RolloverReport",
    "RolloverState",
]
