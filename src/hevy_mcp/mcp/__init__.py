# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Hevy MCP tool layer."""

from .server import TOOL_HANDLERS, create_server
from .tools import HEVY_TOOLS

__all__ = ["HEVY_TOOLS", "TOOL_HANDLERS", "create_server"]
