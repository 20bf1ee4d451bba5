# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Routine tool handlers."""

from __future__ import annotations

from typing import Any

from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.hevy.models import CreateRoutineInput, PaginationParams, UpdateRoutineInput, validate_input

from ..formatters import format_routine, format_routine_list
from ._utils import require_str, without


async def get_routines(client: HevyClient, arguments: dict[str, Any]) -> str:
    params = validate_input(PaginationParams, arguments)
    return format_routine_list(await client.get_routines(page=params.page, page_size=params.page_size))


async def get_routine(client: HevyClient, arguments: dict[str, Any]) -> str:
    routine_id = require_str(arguments, "id", "routine ID")
    return format_routine(await client.get_routine(routine_id))


async def create_routine(client: HevyClient, arguments: dict[str, Any]) -> str:
    data = validate_input(CreateRoutineInput, arguments)
    routine = await client.create_routine(data.to_api())
    return f"✅ Routine created successfully!\n\n{format_routine(routine)}"


async def update_routine(client: HevyClient, arguments: dict[str, Any]) -> str:
    routine_id = require_str(arguments, "id", "routine ID")
    data = validate_input(UpdateRoutineInput, without(arguments, "id"))
    routine = await client.update_routine(routine_id, data.to_api())
    return f"✅ Routine updated successfully!\n\n{format_routine(routine)}"


async def delete_routine(client: HevyClient, arguments: dict[str, Any]) -> str:
    routine_id = require_str(arguments, "id", "routine ID")
    await client.delete_routine(routine_id)
    return f"✅ Routine deleted successfully! (ID: {routine_id})"
