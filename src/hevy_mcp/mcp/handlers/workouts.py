# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Workout tool handlers."""

from __future__ import annotations

import json
from typing import Any

from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.hevy.models import CreateWorkoutInput, UpdateWorkoutInput, WorkoutQueryParams, validate_input

from ..formatters import format_workout, format_workout_list
from ._utils import require_str, without


async def get_workouts(client: HevyClient, arguments: dict[str, Any]) -> str:
    params = validate_input(WorkoutQueryParams, arguments)
    workouts = await client.get_workouts(
        page=params.page,
        page_size=params.page_size,
        start_date=params.start_date,
        end_date=params.end_date,
    )
    return format_workout_list(workouts)


async def get_workout(client: HevyClient, arguments: dict[str, Any]) -> str:
    workout_id = require_str(arguments, "id", "workout ID")
    return format_workout(await client.get_workout(workout_id))


async def create_workout(client: HevyClient, arguments: dict[str, Any]) -> str:
    data = validate_input(CreateWorkoutInput, arguments)
    workout = await client.create_workout(data.to_api())
    return f"✅ Workout created successfully!\n\n{format_workout(workout)}"


async def update_workout(client: HevyClient, arguments: dict[str, Any]) -> str:
    """Update only the fields present in ``arguments``."""
    workout_id = require_str(arguments, "id", "workout ID")
    data = validate_input(UpdateWorkoutInput, without(arguments, "id"))
    workout = await client.update_workout(workout_id, data.to_api())
    return f"✅ Workout updated successfully!\n\n{format_workout(workout)}"


async def delete_workout(client: HevyClient, arguments: dict[str, Any]) -> str:
    workout_id = require_str(arguments, "id", "workout ID")
    await client.delete_workout(workout_id)
    return f"✅ Workout deleted successfully! (ID: {workout_id})"


async def get_workout_count(client: HevyClient, arguments: dict[str, Any]) -> str:
    result = await client.get_workout_count()
    return f"Total workouts: {(result or {}).get('workout_count', 0)}"


async def get_workout_events(client: HevyClient, arguments: dict[str, Any]) -> str:
    since = require_str(arguments, "sinceDate")
    events = await client.get_workout_events(since)
    return json.dumps(events, indent=2)
