# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Custom exception hierarchy for the Hevy MCP server.

Each exception carries the HTTP status it maps to and a short ``error``
label, so the transport can render any of them at the handler boundary.
"""

from __future__ import annotations

from typing import Any


class HevyMCPException(Exception):  # noqa: N818
    """Base exception for all Hevy MCP errors."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(HevyMCPException):
    """Missing or invalid startup settings. Fatal: aborts startup."""

    error = "Configuration error"

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


class AuthenticationError(HevyMCPException):
    """Bad or missing bearer token, or an expired session."""

    status_code = 401
    error = "Unauthorized"


class RateLimitError(HevyMCPException):
    """Request budget exceeded for the current window."""

    status_code = 429
    error = "Too many requests"

    def __init__(self, message: str = "Please try again later", retry_after: int | None = None):
        details = {}
        if retry_after is not None:
            details["retry_after"] = retry_after
        super().__init__(message, details)
        self.retry_after = retry_after


class SessionNotFoundError(HevyMCPException):
    """Message addressed to a session with no registered connection."""

    status_code = 404
    error = "Session not found"

    def __init__(self, session_id: str, message: str | None = None):
        super().__init__(message or f"No active connection for session {session_id}", {"session_id": session_id})
        self.session_id = session_id


class UpstreamError(HevyMCPException):
    """The Hevy API call failed.

    Messages keep the ``Hevy API error`` prefix so production sanitization
    can recognise them.
    """

    status_code = 502
    error = "Upstream error"

    def __init__(self, message: str, status_code: int | None = None, cause: Any = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.upstream_status = status_code
        self.cause = cause


class ValidationException(HevyMCPException):
    """Tool input failed validation.

    Raised when:
    - Required arguments are missing
    - Argument values are out of range or malformed
    """

    status_code = 400
    error = "Validation error"

    def __init__(self, message: str, field: str | None = None, value: Any = None, errors: list | None = None):
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if errors:
            details["errors"] = errors
        super().__init__(message, details)
        self.field = field
        self.value = value


class InternalError(HevyMCPException):
    """Unexpected failure inside the transport itself."""

    status_code = 500
    error = "Internal server error"
