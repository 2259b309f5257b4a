# =============================================================================
# app/routers/sessions.py - Academic Session Administration
# =============================================================================
# Endpoints for the session lifecycle:
# - read / set the active academic session
# - provision the standard tables of the active session
# - roll over to a new academic year
# - read the archive log of a session
#
# Every response is an Outcome envelope {ok, payload, message}.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.dependencies import DatastoreDep, SessionContextDep
from core.models.outcome import Outcome
from core.services.lock_service import Busy

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================

class ActiveSessionRequest(BaseModel):
    """Body for switching the active session without a rollover."""
    active_session: str = Field(
        ...,
        min_length=1,
        alias="activeSession",
        examples=["2025-26"],
        description="Academic session to make active"
    )

    model_config = {"populate_by_name": True}


class RolloverRequest(BaseModel):
    """Body for starting a new academic year."""
    new_session: str = Field(
        ...,
        min_length=1,
        alias="newSession",
        examples=["2025-26"],
        description="Academic session to create and switch to"
    )
    confirmed_by: str | None = Field(
        default=None,
        alias="confirmedBy",
        description="Who confirmed the rollover"
    )

    model_config = {"populate_by_name": True}


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/active", response_model=Outcome)
def get_active_session(ctx: SessionContextDep):
    """Return the active academic session."""
    return Outcome.success({"activeSession": ctx.session})


@router.put("/active", response_model=Outcome)
def set_active_session(request: ActiveSessionRequest, store: DatastoreDep):
    """
    Switch the active session pointer.

    Does not copy any data; use POST /rollover to start a new year. The
    switch runs in the critical section so it cannot land in the middle of
    a rollover; responds 409 if the lock is busy.
    """
    result = store.lock.with_lock(lambda: store.set_active_session(request.active_session))

    if isinstance(result, Busy):
        outcome = Outcome.failure(result.message, payload={"code": "LOCK_BUSY"})
        return JSONResponse(status_code=409, content=outcome.model_dump(mode="json"))

    return Outcome.success({"activeSession": result}, "Session updated")


@router.post("/provision", response_model=Outcome)
def provision_session(store: DatastoreDep, ctx: SessionContextDep):
    """Create every module's standard tables in the active session."""
    provisioned = store.provisioning.provision(ctx.session)
    return Outcome.success(
        {"session": ctx.session, "tables": provisioned},
        f"Session {ctx.session} provisioned.",
    )


@router.post("/rollover", response_model=Outcome)
def rollover_session(request: RolloverRequest, store: DatastoreDep):
    """
    Start a new academic year.

    Copies student, employee and user registries forward, creates empty
    log tables, then switches the active session. Responds 409 if another
    critical section holds the lock.
    """
    outcome = store.rollover.rollover(request.new_session, confirmed_by=request.confirmed_by)

    if outcome.ok:
        return Outcome.success(outcome.payload.model_dump(mode="json"), outcome.message)

    status_code = 409 if outcome.payload.get("code") == "LOCK_BUSY" else 400
    return JSONResponse(status_code=status_code, content=outcome.model_dump(mode="json"))


@router.get("/{session}/archive", response_model=Outcome)
def list_archive(
    session: Annotated[str, Path(description="Academic session label")],
    store: DatastoreDep,
):
    """Archived (deleted) records of a session, oldest first."""
    records = store.archive.list_records(session)
    return Outcome.success([record.model_dump(mode="json") for record in records])
