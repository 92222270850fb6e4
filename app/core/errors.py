"""
Core Errors Module

Standardized error classes and helpers for consistent error handling across the service.
Backend HTTP failures are converted into the same classes.

Usage:
    from app.core.errors import ValidationError

    raise ValidationError("Invalid date format", details={"field": "date"})
"""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


# ==================== Base Error Class ====================

class AppError(Exception):
    """
    Base application error class.

    All custom errors inherit from this class so that a single exception
    handler can render them as HTTP responses.

    Attributes:
        code: Error code (e.g., "validation_error", "not_found")
        message: Human-readable error message
        details: Optional additional error context
        status_code: HTTP status code for this error type
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._default_code()
        self.details = details or {}
        self.status_code = status_code

    def _default_code(self) -> str:
        """
        Generate default error code from class name.

        Returns:
            snake_case version of class name without the "Error" suffix
        """
        name = self.__class__.__name__
        if name.endswith("Error"):
            name = name[:-5]

        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append("_")
            result.append(char.lower())

        return "".join(result)

    def to_dict(self, trace_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON responses.

        Args:
            trace_id: Optional request trace ID

        Returns:
            Error dict with code, message, details, trace_id
        """
        result = {
            "code": self.code,
            "message": self.message,
        }

        if self.details:
            result["details"] = self.details

        if trace_id:
            result["trace_id"] = trace_id

        return result


# ==================== Generic Error Classes ====================

class ValidationError(AppError):
    """Validation error (400 Bad Request)."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="validation_error",
            details=details,
            status_code=400
        )


class UnauthorizedError(AppError):
    """
    Unauthorized error (401 Unauthorized).

    Raised when a session is required but missing, expired or invalid.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="unauthorized",
            details=details,
            status_code=401
        )


class ForbiddenError(AppError):
    """Forbidden error (403 Forbidden)."""

    def __init__(
        self,
        message: str = "Access forbidden",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="forbidden",
            details=details,
            status_code=403
        )


class NotFoundError(AppError):
    """Not found error (404 Not Found)."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="not_found",
            details=details,
            status_code=404
        )


class ConflictError(AppError):
    """
    Conflict error (409 Conflict).

    Raised when the request clashes with existing state: duplicate
    registration, duplicate booking, full slot, pending update request.
    """

    def __init__(
        self,
        message: str = "Request conflicts with existing state",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="conflict",
            details=details,
            status_code=409
        )


class ServiceUnavailableError(AppError):
    """
    Service unavailable error (503 Service Unavailable).

    Raised when the hosted backend is unreachable or unresponsive.
    """

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="service_unavailable",
            details=details,
            status_code=503
        )


class InternalError(AppError):
    """Internal server error (500 Internal Server Error)."""

    def __init__(
        self,
        message: str = "Internal server error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="internal_error",
            details=details,
            status_code=500
        )


# ==================== Biometric Error Classes ====================

class InvalidReferenceEmbeddingError(AppError):
    """
    Stored face embedding is missing, unparseable or has the wrong length.

    This is a data-integrity problem with the user's profile, not a failed
    verification; the user has to re-register their face.
    """

    def __init__(
        self,
        message: str = "Stored face descriptor corrupted. Please update your profile.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="invalid_reference_embedding",
            details=details,
            status_code=409
        )


class NoValidLiveCaptureError(AppError):
    """None of the supplied live captures is a usable embedding. The user may retry."""

    def __init__(
        self,
        message: str = "Live face descriptor invalid. Please capture your face again.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="no_valid_live_capture",
            details=details,
            status_code=422
        )


class FaceMismatchError(AppError):
    """Live capture did not match the stored face. The user may retry."""

    def __init__(
        self,
        message: str = "Face verification failed.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="face_mismatch",
            details=details,
            status_code=403
        )


# ==================== Helper Functions ====================

def from_http_exception(
    e: Exception,
    default_code: str = "service_error",
    safe_message: bool = True
) -> AppError:
    """
    Convert an HTTP exception to AppError.

    Maps httpx.HTTPStatusError and fastapi.HTTPException to the matching
    AppError subclass. With safe_message=True backend error text is logged
    but never returned to the caller.

    Args:
        e: Exception to convert
        default_code: Error code if no mapping applies
        safe_message: If True, use a generic message instead of backend details
    """
    status_code = getattr(e, "status_code", 500)
    detail = str(e)

    if hasattr(e, "detail"):
        detail = e.detail

    # httpx.HTTPStatusError carries the backend response
    response = getattr(e, "response", None)
    if response is not None:
        status_code = response.status_code
        try:
            error_data = response.json()
            if isinstance(error_data, dict):
                detail = error_data.get("message") or error_data.get("detail") or str(error_data)
        except ValueError:
            detail = response.text or f"HTTP {status_code}"

    if safe_message:
        if status_code == 401:
            detail = "Authentication required"
        elif status_code == 403:
            detail = "Access forbidden"
        elif status_code == 404:
            detail = "Resource not found"
        elif status_code == 409:
            detail = "Request conflicts with existing data"
        elif status_code >= 500:
            logger.error(f"Backend error ({status_code}): {detail}")
            detail = "Service error"

    if status_code == 400:
        return ValidationError(message=detail)
    elif status_code == 401:
        return UnauthorizedError(message=detail)
    elif status_code == 403:
        return ForbiddenError(message=detail)
    elif status_code == 404:
        return NotFoundError(message=detail)
    elif status_code == 409:
        return ConflictError(message=detail)
    elif 500 <= status_code < 600:
        return ServiceUnavailableError(message=detail)
    else:
        return AppError(
            message=detail,
            code=default_code,
            status_code=status_code
        )

