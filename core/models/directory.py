# =============================================================================
# core/models/directory.py - Directory Schemas
# =============================================================================
# These models describe what the directory resolver hands out:
# - Collection: folder-like node in the storage hierarchy
# - Container: durable handle for one (module, session) pair
# - TableRef: a named table inside a container
# - SessionContext: the session a single request operates on
#
# Persisted pointer keys are built here so every component agrees on them.
# =============================================================================

from pydantic import BaseModel, Field

from .module import Module


# =============================================================================
# Pointer Keys
# =============================================================================

ACTIVE_SESSION_KEY = "active-session"


def container_key(module: Module, session: str) -> str:
    """Config-store key holding the container id for (module, session)."""
    return f"container-id:{module.value}:{session}"


def folder_key(session: str) -> str:
    """Config-store key holding the session collection id."""
    return f"folder-id:{session}"


# =============================================================================
# Handles
# =============================================================================

class Collection(BaseModel):
    """
    A folder-like node in the storage hierarchy.

    The root collection holds one collection per session; a session
    collection holds the module containers and asset collections.
    """

    id: str = Field(..., description="Backend id of the collection")
    name: str = Field(..., description="Collection name")
    parent_id: str | None = Field(
        default=None,
        description="Parent collection id (None for the root)"
    )
    url: str | None = Field(default=None, description="Browsable location, if the backend has one")

    model_config = {"frozen": True}


class Container(BaseModel):
    """
    Durable handle for one (module, session) pair.

    Example:
        {
            "id": "c1d2...",
            "name": "WH_Students_DB",
            "collection_id": "f00d...",
            "module": "STUDENTS",
            "session": "2024-25"
        }
    """

    id: str = Field(..., description="Backend id of the container")
    name: str = Field(..., description="Container name (fixed per module)")
    collection_id: str | None = Field(
        default=None,
        description="Session collection holding the container"
    )
    module: Module | None = Field(default=None, description="Module this container serves")
    session: str | None = Field(default=None, description="Session this container belongs to")

    model_config = {"frozen": True}


class TableRef(BaseModel):
    """A named table inside a container."""

    container_id: str = Field(..., description="Container holding the table")
    name: str = Field(..., min_length=1, description="Table name")

    model_config = {"frozen": True}


class DirectoryEntry(BaseModel):
    """Persisted mapping (module, session) -> container id."""

    module: Module
    session: str
    container_id: str


class SessionContext(BaseModel):
    """
    The academic session one request operates on.

    Captured once when a request starts so that a concurrent rollover
    cannot switch sessions halfway through a multi-step handler.
    """

    session: str = Field(..., min_length=1, description="Academic session label")

    model_config = {"frozen": True}
