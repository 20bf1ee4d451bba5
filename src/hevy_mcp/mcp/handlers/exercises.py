# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Exercise template, progress and stats handlers."""

from __future__ import annotations

from typing import Any

from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.hevy.models import ExerciseProgressParams, PaginationParams, validate_input

from ..formatters import (
    format_exercise_progress,
    format_exercise_stats,
    format_exercise_template,
    format_exercise_template_list,
)
from ._utils import require_str


async def get_exercise_templates(client: HevyClient, arguments: dict[str, Any]) -> str:
    params = validate_input(PaginationParams, arguments)
    templates = await client.get_exercise_templates(page=params.page, page_size=params.page_size)
    return format_exercise_template_list(templates)


async def get_exercise_template(client: HevyClient, arguments: dict[str, Any]) -> str:
    template_id = require_str(arguments, "id", "exercise template ID")
    return format_exercise_template(await client.get_exercise_template(template_id))


async def get_exercise_progress(client: HevyClient, arguments: dict[str, Any]) -> str:
    params = validate_input(ExerciseProgressParams, arguments)
    progress = await client.get_exercise_progress(
        params.exercise_template_id,
        start_date=params.start_date,
        end_date=params.end_date,
        limit=params.limit,
    )
    return format_exercise_progress(progress)


async def get_exercise_stats(client: HevyClient, arguments: dict[str, Any]) -> str:
    template_id = require_str(arguments, "exercise_template_id")
    stats = await client.get_exercise_stats(template_id)
    return format_exercise_stats(stats or {"exercise_template_id": template_id})
