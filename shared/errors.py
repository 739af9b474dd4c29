"""
Shared error handling for the Pricing Access Layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Pricing Access Layer components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class AccessError(AccessLayerException):
    """Remote store call failed."""

    def __init__(self, message: str = "Remote store access failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("ACCESS_ERROR", message, details)


class NotFoundError(AccessLayerException):
    """No record matched the requested key."""

    def __init__(self, message: str = "Record not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class ValidationError(AccessLayerException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class PoolTimeoutError(AccessLayerException):
    """No pool slot became available in time."""

    def __init__(self, pool: str, timeout: float, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "POOL_TIMEOUT",
            f"{pool}: no slot available after {timeout:.3f}s",
            details
        )
        self.timeout = timeout


class PoolClosedError(AccessLayerException):
    """Pool no longer hands out slots."""

    def __init__(self, pool: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("POOL_CLOSED", f"{pool}: pool is closed", details)
