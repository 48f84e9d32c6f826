"""
Error Handling
==============

Error taxonomy and exception handlers.

Every error response has the shape ``{"error": str, "details"?: str}``.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class AppException(HTTPException):
    """Base application exception with a structured error body."""

    def __init__(
        self,
        status_code: int,
        error: str,
        details: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.error = error
        self.details = details

        detail = {"error": error}
        if details:
            detail["details"] = details

        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Malformed or missing input."""

    def __init__(
        self,
        error: str = "Validation failed",
        details: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error=error,
            details=details,
        )


class UnauthorizedError(AppException):
    """Missing or invalid credential."""

    def __init__(
        self,
        error: str = "Unauthorized",
        details: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error=error,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppException):
    """Valid credential, but the caller does not own the resource."""

    def __init__(
        self,
        error: str = "Forbidden",
        details: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error=error,
            details=details,
        )


class NotFoundError(AppException):
    """Resource id does not resolve."""

    def __init__(
        self,
        error: str = "Todo not found",
        details: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error=error,
            details=details,
        )


class StoreError(AppException):
    """Document store unreachable, timed out or returned garbage."""

    def __init__(
        self,
        details: Optional[str] = None,
        error: str = "Internal Server Error",
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error=error,
            details=details,
        )


class UploadError(AppException):
    """Blob store upload failed."""

    def __init__(
        self,
        details: Optional[str] = None,
        error: str = "Failed to upload image",
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error=error,
            details=details,
        )


def one_line(exc: BaseException) -> str:
    """Short single-line description of an exception for error bodies."""
    text = str(exc).strip().splitlines()
    message = text[0] if text else ""
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


# =============================================================================
# Exception Handlers
# =============================================================================

async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handler for AppException."""
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s status=%d error=%s details=%s",
            request.method, request.url.path, exc.status_code, exc.error, exc.details,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.detail,
        headers=exc.headers,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handler for standard HTTPException."""
    # Check if detail is already structured
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = {"error": str(exc.detail)}

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handler for request body/parameter validation errors."""
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        details = "Failed to parse request body"
    elif errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", []) if loc != "body")
        message = first_error.get("msg", "Validation error")
        details = f"{field}: {message}" if field else message
    else:
        details = "Validation error"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request",
            "details": details,
        },
    )


async def global_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "unhandled_error method=%s path=%s", request.method, request.url.path,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "details": one_line(exc),
        },
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with FastAPI app.

    Usage:
        from app.core.errors import setup_exception_handlers
        setup_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
