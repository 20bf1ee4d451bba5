# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Shared helpers for MCP tool handlers."""

from __future__ import annotations

import json
import logging
from typing import Any

from hevy_mcp.core.exceptions import ConfigurationError, UpstreamError, ValidationException

logger = logging.getLogger(__name__)


def require_str(arguments: dict[str, Any], key: str, label: str | None = None) -> str:
    """Return a required non-empty string argument or raise ValidationException."""
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(f"{label or key} is required", field=key)
    return value


def without(arguments: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Copy of ``arguments`` minus ``keys``."""
    return {k: v for k, v in arguments.items() if k not in keys}


def format_tool_error(error: BaseException) -> str:
    """Render a handler failure as the text of an error tool result."""
    if isinstance(error, UpstreamError):
        status = f" (Status: {error.upstream_status})" if error.upstream_status else ""
        return f"Hevy API Error: {error.message}{status}"

    if isinstance(error, ValidationException):
        errors = error.details.get("errors")
        details = f"\nDetails: {json.dumps(errors, indent=2, default=str)}" if errors else ""
        return f"Validation Error: {error.message}{details}"

    if isinstance(error, ConfigurationError):
        return f"Configuration Error: {error.message}"

    return f"Error: {error}"
