# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from core.datastore import Datastore, create_datastore
from core.models.directory import SessionContext


@lru_cache
def get_datastore() -> Datastore:
    """
    Get the process-wide Datastore.

    Built once on first use from settings.
    """
    return create_datastore()


def get_session_context(store: Annotated[Datastore, Depends(get_datastore)]) -> SessionContext:
    """Active session captured at the start of the request."""
    return store.context()


# Type aliases for dependency injection
DatastoreDep = Annotated[Datastore, Depends(get_datastore)]
SessionContextDep = Annotated[SessionContext, Depends(get_session_context)]
