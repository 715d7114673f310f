"""
Shared response envelopes.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. health check or logout."""
    message: str = Field(..., description="Human readable message")
    details: Optional[dict] = Field(default=None, description="Optional extra data")


class ErrorInfo(BaseModel):
    type: str = Field(..., description="Machine-readable error code, e.g. material_shortage")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Shortage list, validation issues, etc.")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Body of every non-2xx response produced by the API."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo
    correlation_id: Optional[str] = Field(default=None, description="X-Correlation-ID of the request")
    path: Optional[str] = None
    method: Optional[str] = None
    timestamp: datetime = Field(..., description="UTC time the error was produced")

    @classmethod
    def build(
        cls,
        status: int,
        error_type: str,
        message: str,
        details: Any = None,
        *,
        correlation_id: Optional[str] = None,
        path: Optional[str] = None,
        method: Optional[str] = None,
    ) -> "ErrorResponse":
        """Envelope stamped with the current UTC time."""
        return cls(
            status=status,
            error=ErrorInfo(type=error_type, message=message, details=details),
            correlation_id=correlation_id,
            path=path,
            method=method,
            timestamp=datetime.now(tz=timezone.utc),
        )
