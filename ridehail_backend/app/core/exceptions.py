"""
Custom exceptions and error handlers for consistent error responses.

Every error leaving the API has the same body:
    {"error_code": ..., "message": ..., "details": {...}}

The job-assignment errors form a closed set (unauthorized, invalid input,
not found, conflict, compensation failed) so callers can branch on the
error code instead of parsing messages.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, Optional

logger = logging.getLogger("ridehail.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class UnauthorizedError(AppException):
    """Raised when the caller identity is missing or cannot be verified."""

    def __init__(self, message: str = "Not authorized, no driver identity in request"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class InvalidInputError(AppException):
    """Raised when an identifier or field is malformed."""

    def __init__(self, field: str, value: Any = None, message: Optional[str] = None):
        super().__init__(
            message=message or f"Invalid {field}",
            error_code="ERR_INPUT_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field, "value": None if value is None else str(value)}
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class ConflictError(AppException):
    """
    Raised when the current state forbids the operation.

    `reason` is a stable machine-readable tag:
        DRIVER_UNAVAILABLE, BOOKING_NOT_PENDING, DRIVER_RACE_LOST, BOOKING_RACE_LOST
    """

    def __init__(self, message: str, reason: str, details: Dict[str, Any] = None):
        self.reason = reason
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"reason": reason, **(details or {})}
        )


class CompensationFailedError(AppException):
    """
    Raised when a rollback write did not succeed after an earlier failure.

    The driver is left reserved with no booking and needs repair
    (see scripts/release_driver.py). The triggering error is kept in
    `cause` and summarised in the details.
    """

    def __init__(self, driver_id: int, booking_id: Any, step: str, cause: Exception):
        self.driver_id = driver_id
        self.booking_id = booking_id
        self.step = step
        self.cause = cause
        super().__init__(
            message=f"Compensation failed for driver {driver_id}; driver requires manual release",
            error_code="ERR_SAGA_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={
                "driver_id": driver_id,
                "booking_id": booking_id,
                "step": step,
                "cause_error_code": getattr(cause, "error_code", type(cause).__name__),
                "cause_message": getattr(cause, "message", str(cause)),
            }
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        },
        headers=headers
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc)
            }
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold exception instances which JSONResponse cannot encode
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
