# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""MCP server exposing the Hevy tools.

``create_server`` builds a low-level ``mcp`` Server bound to one HevyClient.
The same server instance serves every transport connection.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.server import Server
from mcp.types import CallToolResult, TextContent, Tool

from hevy_mcp.core.config import SERVER_NAME
from hevy_mcp.core.logging import tool_logger
from hevy_mcp.hevy.client import HevyClient

from .handlers._utils import format_tool_error
from .handlers.exercises import (
    get_exercise_progress,
    get_exercise_stats,
    get_exercise_template,
    get_exercise_templates,
)
from .handlers.folders import (
    create_routine_folder,
    delete_routine_folder,
    get_routine_folder,
    get_routine_folders,
    update_routine_folder,
)
from .handlers.routines import create_routine, delete_routine, get_routine, get_routines, update_routine
from .handlers.webhooks import create_webhook_subscription, delete_webhook_subscription, get_webhook_subscription
from .handlers.workouts import (
    create_workout,
    delete_workout,
    get_workout,
    get_workout_count,
    get_workout_events,
    get_workouts,
    update_workout,
)
from .tools import HEVY_TOOLS

logger = logging.getLogger(__name__)

ToolHandler = Callable[[HevyClient, dict[str, Any]], Awaitable[str]]


# ============================================================================
# Tool Handler Registry
# ============================================================================

TOOL_HANDLERS: dict[str, ToolHandler] = {
    # Workouts
    "get-workouts": get_workouts,
    "get-workout": get_workout,
    "create-workout": create_workout,
    "update-workout": update_workout,
    "delete-workout": delete_workout,
    "get-workout-count": get_workout_count,
    "get-workout-events": get_workout_events,
    # Routines
    "get-routines": get_routines,
    "get-routine": get_routine,
    "create-routine": create_routine,
    "update-routine": update_routine,
    "delete-routine": delete_routine,
    # Exercises
    "get-exercise-templates": get_exercise_templates,
    "get-exercise-template": get_exercise_template,
    "get-exercise-progress": get_exercise_progress,
    "get-exercise-stats": get_exercise_stats,
    # Routine folders
    "get-routine-folders": get_routine_folders,
    "get-routine-folder": get_routine_folder,
    "create-routine-folder": create_routine_folder,
    "update-routine-folder": update_routine_folder,
    "delete-routine-folder": delete_routine_folder,
    # Webhooks
    "get-webhook-subscription": get_webhook_subscription,
    "create-webhook-subscription": create_webhook_subscription,
    "delete-webhook-subscription": delete_webhook_subscription,
}


def _text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


async def dispatch_tool(client: HevyClient, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
    """Run one tool and wrap its text, or its failure, as a tool result.

    Failures never escape: they come back as ``isError`` results.
    """
    arguments = arguments or {}
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return _text_result(f"Unknown tool: {name}", is_error=True)

    tool_logger.log_call(name, arguments)
    start = time.perf_counter()
    try:
        text = await handler(client, arguments)
    except Exception as e:
        if isinstance(e, (ValueError, TypeError, KeyError)):
            logger.exception(f"Unexpected error in tool {name}")
        else:
            logger.warning(f"Tool {name} failed: {e}")
        tool_logger.log_result(name, False, (time.perf_counter() - start) * 1000)
        return _text_result(format_tool_error(e), is_error=True)

    tool_logger.log_result(name, True, (time.perf_counter() - start) * 1000)
    return _text_result(text)


def create_server(client: HevyClient, name: str = SERVER_NAME) -> Server:
    """Create the MCP server with every Hevy tool registered."""
    server: Server = Server(name)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List all available tools."""
        return HEVY_TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
        """Route tool calls to the appropriate handler."""
        return await dispatch_tool(client, name, arguments)

    return server
