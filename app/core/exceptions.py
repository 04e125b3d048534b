"""Application-wide exception classes and handlers.

Every error the API reports on purpose is an ``AppError``. Handlers registered
here render them in a single JSON envelope so clients can branch on
``error.code`` instead of parsing messages.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for application errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(AppError):
    """Resource not found error (404)."""

    def __init__(self, message: str = "Resource not found", resource: str | None = None):
        details = {"resource": resource} if resource else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details,
        )


class ValidationError(AppError):
    """Validation error (400)."""

    def __init__(self, message: str = "Validation failed", field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class ConflictError(AppError):
    """Resource conflict error (409)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        resource: str | None = None,
        error_code: str = "CONFLICT",
    ):
        details = {"resource": resource} if resource else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
            details=details,
        )


class DuplicateActiveEnrollmentError(ConflictError):
    """The student already holds an active enrollment in the course."""

    def __init__(self, message: str = "Student already has an active enrollment in this course"):
        super().__init__(
            message=message,
            resource="enrollment",
            error_code="DUPLICATE_ACTIVE_ENROLLMENT",
        )


class DuplicateCourseCodeError(ConflictError):
    """A course with the same code already exists."""

    def __init__(self, code: str):
        super().__init__(
            message=f"A course with code '{code}' already exists",
            resource="course",
            error_code="DUPLICATE_COURSE_CODE",
        )


class UnauthorizedError(AppError):
    """Authentication required error (401)."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="UNAUTHORIZED",
        )


class ForbiddenError(AppError):
    """Access forbidden error (403)."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="FORBIDDEN",
        )


class StoreError(AppError):
    """Database write/read failure (500)."""

    def __init__(self, message: str = "Database operation failed", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="STORE_ERROR",
            details=details,
        )


class ExternalServiceError(AppError):
    """External service error (502)."""

    def __init__(self, message: str = "External service error", service: str | None = None):
        details = {"service": service} if service else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="EXTERNAL_SERVICE_ERROR",
            details=details,
        )


class StorageError(ExternalServiceError):
    """Object storage failure."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message=message, service="storage")


class IdentityProviderError(ExternalServiceError):
    """Identity provider failure."""

    def __init__(self, message: str = "Identity provider request failed"):
        super().__init__(message=message, service="identity")


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle AppError and return consistent JSON response."""
    logger.error(
        "AppError: %s (code=%s, status=%d)",
        exc.message,
        exc.error_code,
        exc.status_code,
        extra={"details": exc.details},
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": exc.error_code,
                "message": exc.message,
                "details": exc.details if exc.details else None,
            },
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with a generic error response."""
    logger.exception("Unhandled exception: %s", str(exc))

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": None,
            },
        },
    )


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Register exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
        debug: If True, unhandled exceptions propagate with stack traces.
    """
    app.add_exception_handler(AppError, app_exception_handler)  # type: ignore[arg-type]
    if not debug:
        app.add_exception_handler(Exception, unhandled_exception_handler)
