"""Standardized error handling for the API.

This module provides:
1. Exception classes for workspace and sandbox errors
2. Exception handlers for FastAPI
3. Standard error response model

Usage:
    from workspace_api.errors import NotFoundError, PathEscapeError

    if not target.exists():
        raise NotFoundError(detail="File not found", path="src/main.py")

    # Register handlers in main.py:
    from workspace_api.errors import register_exception_handlers
    register_exception_handlers(app)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    detail: str | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None


class APIError(Exception):
    """Base class for API errors."""

    status_code: int = 500
    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: str | None = None,
        error_code: str | None = None,
        **context: Any,
    ) -> None:
        self.detail = detail or self.__class__.detail
        self.error_code = error_code
        self.context = context if context else None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.error,
            detail=self.detail,
            error_code=self.error_code,
            context=self.context,
        )


class NotFoundError(APIError):
    """Resource not found error (404)."""

    status_code = 404
    error = "not_found"
    detail = "Resource not found"


class BadRequestError(APIError):
    """Bad request error (400)."""

    status_code = 400
    error = "bad_request"
    detail = "Invalid request"


class ForbiddenError(APIError):
    """Forbidden error (403)."""

    status_code = 403
    error = "forbidden"
    detail = "Access denied"


class PathEscapeError(ForbiddenError):
    """A path resolved outside the workspace root (403)."""

    error = "path_escape"
    detail = "Invalid path: attempting to access outside workspace"


class InvalidPackageNameError(BadRequestError):
    """One or more package names failed validation (400)."""

    error = "invalid_package_name"
    detail = (
        "Invalid package names detected. "
        "Package names must start with alphanumeric characters."
    )


class WorkspaceIOError(APIError):
    """Filesystem operation failed (500)."""

    status_code = 500
    error = "io_error"
    detail = "Workspace operation failed"


class ServiceUnavailableError(APIError):
    """Service unavailable error (503)."""

    status_code = 503
    error = "service_unavailable"
    detail = "Service temporarily unavailable"


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors."""
    logger.warning(
        "API error: %s (status=%d, path=%s)",
        exc.detail,
        exc.status_code,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.exception("Unhandled exception: %s (path=%s)", exc, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_error",
            detail="An unexpected error occurred",
        ).model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
