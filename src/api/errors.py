"""Error handling and HTTP mapping for the API.

Error Code Mapping:
    - ScheduleConfigError -> 422 INVALID_CONFIG
    - TimestampResolutionError -> 422 INVALID_INPUT
    - SlotAssignmentError -> 500 INTERNAL_ERROR
    - Generic exceptions -> 500 INTERNAL_ERROR
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from imageschedule.errors import (
    ScheduleConfigError,
    ScheduleError,
    SlotAssignmentError,
    TimestampResolutionError,
)

from .schemas import ApiErrorResponse, ErrorDetail


logger = logging.getLogger(__name__)


# =============================================================================
# API Exception Classes
# =============================================================================


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        status_code: HTTP status code to return.
        code: Machine-readable error code.
        message: Human-readable error message.
        details: Optional additional context.
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


class InvalidInputError(ApiError):
    """Raised when request items cannot be scheduled."""

    def __init__(
        self,
        message: str = "Invalid input",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=422,
            code="INVALID_INPUT",
            message=message,
            details=details,
        )


class InvalidConfigError(ApiError):
    """Raised when scheduling parameters are not usable numbers."""

    def __init__(
        self,
        message: str = "Invalid schedule configuration",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=422,
            code="INVALID_CONFIG",
            message=message,
            details=details,
        )


class InternalError(ApiError):
    """Raised for unexpected internal errors."""

    def __init__(
        self,
        message: str = "Internal server error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=500,
            code="INTERNAL_ERROR",
            message=message,
            details=details,
        )


# =============================================================================
# Error Mapping Functions
# =============================================================================


def map_exception_to_api_error(exc: Exception) -> ApiError:
    """Map internal exceptions to appropriate API errors.

    Args:
        exc: The exception raised during processing.

    Returns:
        An ApiError subclass with appropriate HTTP status and code.
    """
    if isinstance(exc, ScheduleConfigError):
        return InvalidConfigError(message=exc.message, details=exc.details)

    if isinstance(exc, TimestampResolutionError):
        return InvalidInputError(
            message=exc.message,
            details={**exc.details, "reason": exc.code},
        )

    if isinstance(exc, SlotAssignmentError):
        return InternalError(message=exc.message, details=exc.details)

    if isinstance(exc, ApiError):
        return exc

    return InternalError(
        message=str(exc) or "An unexpected error occurred",
        details={"exception_type": type(exc).__name__},
    )


def create_error_response(api_error: ApiError) -> ApiErrorResponse:
    """Create a structured error response from an API error."""
    return ApiErrorResponse(
        error=ErrorDetail(
            code=api_error.code,
            message=api_error.message,
            details=api_error.details,
        )
    )


# =============================================================================
# Exception Handlers
# =============================================================================


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        "API error: code=%s message=%s request_id=%s",
        exc.code,
        exc.message,
        request_id,
    )

    response = create_error_response(exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
        headers={"X-Request-ID": request_id},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map library and unexpected exceptions to JSON error responses.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        JSONResponse with error details.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    api_error = map_exception_to_api_error(exc)

    if api_error.status_code >= 500:
        logger.error(
            "Internal error: code=%s message=%s request_id=%s",
            api_error.code,
            api_error.message,
            request_id,
            exc_info=True,
        )
    else:
        logger.warning(
            "Request error: code=%s message=%s request_id=%s",
            api_error.code,
            api_error.message,
            request_id,
        )

    response = create_error_response(api_error)
    return JSONResponse(
        status_code=api_error.status_code,
        content=response.model_dump(),
        headers={"X-Request-ID": request_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(ScheduleError, generic_exception_handler)

    # Catch-all for unexpected errors
    app.add_exception_handler(Exception, generic_exception_handler)
