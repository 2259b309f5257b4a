# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import DatastoreDep
from core.models.outcome import Outcome

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthPayload(BaseModel):
    """Basic health status."""
    status: str
    session: str
    timestamp: str
    environment: str
    version: str


class ReadinessPayload(BaseModel):
    """Backend connectivity checks."""
    status: str
    config_store: str
    storage: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=Outcome)
def health_check(store: DatastoreDep):
    """
    Health check endpoint.

    Returns the active academic session along with basic status.
    """
    payload = HealthPayload(
        status="active",
        session=store.directory.get_active_session(),
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )
    return Outcome.success(payload.model_dump(), "SchoolVault API is online.")


@router.get("/health/ready", response_model=Outcome)
def readiness_check(store: DatastoreDep):
    """
    Readiness check endpoint.

    Checks that the config store and storage backend answer.
    """
    config_status = "unknown"
    storage_status = "unknown"

    try:
        store.directory.get_active_session()
        config_status = "healthy"
    except Exception as e:
        config_status = f"unhealthy: {str(e)[:50]}"

    try:
        store.backend.find_collection(settings.ROOT_COLLECTION_NAME)
        storage_status = "healthy"
    except Exception as e:
        storage_status = f"unhealthy: {str(e)[:50]}"

    all_healthy = config_status == "healthy" and storage_status == "healthy"
    payload = ReadinessPayload(
        status="ready" if all_healthy else "degraded",
        config_store=config_status,
        storage=storage_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return Outcome(ok=all_healthy, payload=payload.model_dump(), message=payload.status)
