# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Standardized HTTP error responses for the transport.

Every error leaves the server in the same shape:
{
    "error": "Short label",
    "message": "Human readable message"
}

In production, messages pass through ``sanitize_error_message`` first.
"""

from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse

from hevy_mcp.core.exceptions import AuthenticationError, HevyMCPException, InternalError, RateLimitError
from hevy_mcp.core.logging import current_request_id, new_request_id

from .security import sanitize_error_message

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR RESPONSE HELPERS
# =============================================================================


def error_response(
    error: str,
    message: str,
    status_code: int = 400,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        error: Short error label (e.g., "Unauthorized")
        message: Human-readable error message
        status_code: HTTP status code (default 400)
        headers: Extra response headers

    Returns:
        JSONResponse with standardized error format
    """
    return JSONResponse({"error": error, "message": message}, status_code=status_code, headers=headers)


def exception_response(exc: HevyMCPException, headers: dict[str, str] | None = None) -> JSONResponse:
    """Render a HevyMCPException in the standard shape."""
    return error_response(exc.error, exc.message, status_code=exc.status_code, headers=headers)


def bad_request_error(message: str) -> JSONResponse:
    """Create a 400 error response."""
    return error_response("Bad request", message, status_code=400)


def invalid_json_error() -> JSONResponse:
    """Create a 400 error for a body that is not a JSON-RPC message."""
    return error_response("Bad request", "Invalid JSON-RPC message", status_code=400)


def unauthorized_error(message: str = "Invalid or missing bearer token") -> JSONResponse:
    """Create a 401 authentication error response."""
    return exception_response(AuthenticationError(message), headers={"WWW-Authenticate": "Bearer"})


def session_expired_error() -> JSONResponse:
    """Create a 401 response for an expired session."""
    return error_response("Session expired", "Session has expired, reconnect to continue", status_code=401)


def not_found_error(resource: str = "Session") -> JSONResponse:
    """Create a 404 not found error response."""
    return error_response(f"{resource} not found", f"{resource} not found", status_code=404)


def payload_too_large_error(limit: int) -> JSONResponse:
    """Create a 413 error for an oversized request body."""
    return error_response("Payload too large", f"Request body exceeds {limit} bytes", status_code=413)


def rate_limited_error(headers: dict[str, str] | None = None, message: str = "Please try again later") -> JSONResponse:
    """Create a 429 error response carrying the rate limit headers."""
    retry_after = (headers or {}).get("Retry-After")
    exc = RateLimitError(message, retry_after=int(retry_after) if retry_after else None)
    return exception_response(exc, headers=headers)


def internal_error(message: str = "Internal server error", exc: BaseException | None = None) -> JSONResponse:
    """Create a 500 internal error response.

    The body carries the request id so a client report can be matched
    with the logged traceback.
    """
    request_id = current_request_id() or new_request_id()
    if exc is not None:
        logger.error(f"request_id={request_id} {type(exc).__name__}: {exc}", exc_info=exc)
    error = InternalError(message)
    return JSONResponse(
        {"error": error.error, "message": error.message, "request_id": request_id},
        status_code=error.status_code,
    )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings is not None and settings.is_production)


async def hevy_exception_handler(request: Request, exc: HevyMCPException) -> JSONResponse:
    """Render a HevyMCPException raised by an endpoint."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    message = sanitize_error_message(exc.message, _is_production(request))
    return error_response(exc.error, message, status_code=exc.status_code)


# Unexpected exceptions are answered by InternalErrorMiddleware, inside the gate
EXCEPTION_HANDLERS = {
    HevyMCPException: hevy_exception_handler,
}
