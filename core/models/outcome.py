# =============================================================================
# core/models/outcome.py - Outcome Envelope
# =============================================================================
# The caller-facing envelope every operation surface returns:
#   {"ok": bool, "payload": ..., "message": str}
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field, field_validator


class Outcome(BaseModel):
    """
    Result envelope consumed by request handlers.

    Example:
        Outcome.success({"activeSession": "2025-26"}, "Session updated")
        Outcome.failure("Database busy. Try again later.")
    """

    ok: bool = Field(..., description="True if the operation succeeded")
    payload: Any = Field(default=None, description="Operation result, if any")
    message: str = Field(default="", description="Human-readable status message")

    @field_validator("message", mode="before")
    @classmethod
    def coerce_message(cls, value: Any) -> str:
        # Messages are always plain strings, never nested objects
        return "" if value is None else str(value)

    @classmethod
    def success(cls, payload: Any = None, message: str = "") -> "Outcome":
        return cls(ok=True, payload=payload, message=message)

    @classmethod
    def failure(cls, message: str = "An unknown error occurred", payload: Any = None) -> "Outcome":
        return cls(ok=False, payload=payload, message=message or "An unknown error occurred")
