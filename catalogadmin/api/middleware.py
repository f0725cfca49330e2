"""API middleware and error mapping for the catalog admin API.

Provides:
- Request ID correlation
- Error handling
- Domain error to HTTP response mapping
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from catalogadmin.domain.exceptions import (
    DomainError,
    FetchError,
    NotFoundError,
    SourceReadError,
    SourceUnavailableError,
    ValidationError,
    WriteError,
)

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": request_id,
                },
            )


# ============================================================================
# Domain Error Mapping
# ============================================================================


# Checked in order, first match wins.
DOMAIN_ERROR_STATUS: list[tuple[type[DomainError], int, str]] = [
    (ValidationError, 422, "VALIDATION_ERROR"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (SourceUnavailableError, status.HTTP_500_INTERNAL_SERVER_ERROR, "SOURCE_UNAVAILABLE"),
    (SourceReadError, status.HTTP_400_BAD_REQUEST, "SOURCE_READ_ERROR"),
    (FetchError, status.HTTP_503_SERVICE_UNAVAILABLE, "FETCH_ERROR"),
    (WriteError, status.HTTP_500_INTERNAL_SERVER_ERROR, "WRITE_ERROR"),
]


def domain_error_status(exc: DomainError) -> tuple[int, str]:
    """Get the HTTP status and error code for a domain error."""
    for error_type, status_code, error_code in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, error_code
    return status.HTTP_400_BAD_REQUEST, "DOMAIN_ERROR"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a domain error in the standard error format."""
    request_id = getattr(request.state, "request_id", None)
    status_code, error_code = domain_error_status(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Request failed",
        path=request.url.path,
        error_code=error_code,
        error=exc.message,
    )

    details = []
    if isinstance(exc, ValidationError):
        details.append({"field": exc.field, "message": exc.message})

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": exc.message,
            "details": details,
            "request_id": request_id,
        },
    )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (runs inside request ID correlation)
    app.add_middleware(ErrorHandlerMiddleware)

    # Request ID correlation (outermost)
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(DomainError, domain_error_handler)
