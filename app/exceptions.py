# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception classes for the data-store core and the handlers that
# turn them into outcome envelopes for the admin API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class SchoolVaultException(Exception):
    """
    Base exception for SchoolVault.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "SCHOOLVAULT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to an outcome envelope."""
        payload: dict[str, Any] = {"code": self.code}
        if self.suggestion:
            payload["suggestion"] = self.suggestion
        if self.details:
            payload["details"] = self.details
        return {
            "ok": False,
            "payload": payload,
            "message": self.message,
        }


# =============================================================================
# Directory Exceptions
# =============================================================================
# Raised by storage backends when a persisted id no longer resolves.
# DirectoryResolver catches these and rediscovers by name.

class ContainerNotFoundError(SchoolVaultException):
    """Raised when a container id does not exist in the backend."""

    def __init__(self, container_id: str):
        super().__init__(
            message=f"Container not found: {container_id}",
            code="CONTAINER_NOT_FOUND",
            status_code=404,
            suggestion="Resolve the container by module and session instead of by id",
            details={"container_id": container_id}
        )


class CollectionNotFoundError(SchoolVaultException):
    """Raised when a collection id does not exist in the backend."""

    def __init__(self, collection_id: str):
        super().__init__(
            message=f"Collection not found: {collection_id}",
            code="COLLECTION_NOT_FOUND",
            status_code=404,
            suggestion="Resolve the session folder by name instead of by id",
            details={"collection_id": collection_id}
        )


class InvalidSessionError(SchoolVaultException):
    """Raised when a session name is empty or a rollover target is invalid."""

    def __init__(self, session: str, reason: str = "Session name must not be empty"):
        super().__init__(
            message=f"Invalid session '{session}': {reason}",
            code="INVALID_SESSION",
            status_code=400,
            suggestion="Use an academic-year label such as '2025-26'",
            details={"session": session}
        )


# =============================================================================
# Table Exceptions
# =============================================================================

class TableNotFoundError(SchoolVaultException):
    """Raised when a row operation targets a table that does not exist."""

    def __init__(self, container_id: str, table_name: str):
        super().__init__(
            message=f"Table '{table_name}' not found in container {container_id}",
            code="TABLE_NOT_FOUND",
            status_code=404,
            suggestion="Create the table with TableAccessor.get_or_create first",
            details={"container_id": container_id, "table": table_name}
        )


class RowPositionError(SchoolVaultException):
    """Raised when an update/delete position is outside the data rows."""

    def __init__(self, table_name: str, position: int, row_count: int):
        super().__init__(
            message=f"Row position {position} out of range for '{table_name}' ({row_count} rows)",
            code="ROW_POSITION_OUT_OF_RANGE",
            status_code=400,
            suggestion="Re-read the table and use find_position to locate the row again",
            details={"table": table_name, "position": position, "row_count": row_count}
        )


# =============================================================================
# Concurrency Exceptions
# =============================================================================

class LockBusyError(SchoolVaultException):
    """Raised by critical_section() when the lock was not acquired in time."""

    def __init__(self, timeout_ms: int):
        super().__init__(
            message="Database busy. Try again later.",
            code="LOCK_BUSY",
            status_code=409,
            suggestion="Retry the request in a few seconds",
            details={"timeout_ms": timeout_ms}
        )


# =============================================================================
# Backend Exceptions
# =============================================================================

class StorageBackendError(SchoolVaultException):
    """Raised when the storage backend fails unexpectedly."""

    def __init__(
        self,
        operation: str,
        error: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=f"Storage backend failed during {operation}: {error}",
            code="STORAGE_BACKEND_ERROR",
            status_code=500,
            suggestion="Try again later or check backend connectivity",
            details={"operation": operation, **(details or {})}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def schoolvault_exception_handler(
    request: Request,
    exc: SchoolVaultException
) -> JSONResponse:
    """
    Convert SchoolVaultException to a JSON outcome envelope.

    Returns:
    - ok: always false
    - payload: machine-readable code, suggestion and details
    - message: human-readable message
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "ok": False,
            "payload": {"code": "VALIDATION_ERROR", "errors": str(exc)},
            "message": "Validation error",
        }
    )
