# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the SchoolVault admin API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    SchoolVaultException,
    schoolvault_exception_handler,
    validation_exception_handler,
)
from app.routers import health, sessions

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the selected backends on startup and shutdown.
    """
    logger.info(f"Starting SchoolVault API in {settings.ENVIRONMENT} mode")
    logger.info(
        f"Storage: {settings.STORAGE_BACKEND}, cache: {settings.CACHE_BACKEND}, "
        f"lock: {settings.LOCK_BACKEND}"
    )

    yield

    logger.info("Shutting down SchoolVault API")


# Create FastAPI application
app = FastAPI(
    title="SchoolVault API",
    description="""
## Session-Isolated School Data Store

Every module (students, employees, fees, attendance, ...) lives in its own
container per academic session. Containers are created on first use.

### Academic Year Lifecycle

1. **Check** the active session: `GET /api/v1/sessions/active`
2. **Provision** standard tables: `POST /api/v1/sessions/provision`
3. **Roll over** to a new year: `POST /api/v1/sessions/rollover`
   - Student, employee and user registries are copied forward
   - Attendance, fees, homework and results start empty
   - The previous year stays untouched

All responses use the envelope `{"ok": bool, "payload": ..., "message": str}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Sessions",
            "description": "Academic session administration",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(SchoolVaultException)
async def handle_schoolvault_exception(request: Request, exc: SchoolVaultException):
    """Handle custom SchoolVault exceptions."""
    return await schoolvault_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "payload": {"code": "INTERNAL_ERROR"},
            "message": f"Server Exception: {exc}",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Academic session endpoints
app.include_router(
    sessions.router,
    prefix="/api/v1/sessions",
    tags=["Sessions"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "SchoolVault API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
