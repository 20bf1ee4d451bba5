# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Hevy tool definitions.

Contains HEVY_TOOLS, the MCP tool definitions exposed by the server.

Tool list:
    get-workouts                 List workouts with date filter and paging
    get-workout                  Workout details by ID
    create-workout               Log a new workout
    update-workout               Change an existing workout
    delete-workout               Delete a workout
    get-workout-count            Total number of workouts
    get-workout-events           Update/delete events since a date
    get-routines                 List saved routines
    get-routine                  Routine details by ID
    create-routine               Create a routine
    update-routine               Change a routine
    delete-routine               Delete a routine
    get-exercise-templates       Browse exercise templates
    get-exercise-template        Exercise template by ID
    get-exercise-progress        History for one exercise
    get-exercise-stats           Personal records for one exercise
    get-routine-folders          List routine folders
    get-routine-folder           Folder by ID
    create-routine-folder        Create a folder
    update-routine-folder        Rename a folder
    delete-routine-folder        Delete a folder
    get-webhook-subscription     Current webhook subscription
    create-webhook-subscription  Subscribe a URL to events
    delete-webhook-subscription  Remove the webhook subscription
"""

from __future__ import annotations

from typing import Any

from mcp.types import Tool

SET_TYPES = ["normal", "warmup", "dropset", "failure"]
WEBHOOK_EVENTS = [
    "workout.created",
    "workout.updated",
    "workout.deleted",
    "routine.created",
    "routine.updated",
    "routine.deleted",
]

_SET_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": SET_TYPES, "description": "Type of set"},
        "weight_kg": {"type": "number", "description": "Weight in kilograms"},
        "reps": {"type": "number", "description": "Number of repetitions"},
        "distance_meters": {"type": "number", "description": "Distance in meters (for cardio)"},
        "duration_seconds": {"type": "number", "description": "Duration in seconds (for cardio/timed exercises)"},
        "rpe": {"type": "number", "description": "Rate of Perceived Exertion (1-10)"},
    },
    "required": ["type"],
}

_EXERCISE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "exercise_template_id": {"type": "string", "description": "ID of the exercise template"},
        "superset_id": {"type": "string", "description": "Optional superset ID to group exercises"},
        "notes": {"type": "string", "description": "Optional notes for this exercise"},
        "sets": {"type": "array", "description": "Array of sets", "items": _SET_SCHEMA},
    },
    "required": ["exercise_template_id", "sets"],
}


def _id_schema(description: str, name: str = "id") -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {name: {"type": "string", "description": description}},
        "required": [name],
    }


def _paging_schema(noun: str, default_size: int) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "page": {"type": "number", "description": "Page number for pagination (default: 0)", "default": 0},
            "pageSize": {
                "type": "number",
                "description": f"Number of {noun} per page (default: {default_size}, max: 100)",
                "default": default_size,
            },
        },
    }


_EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


HEVY_TOOLS = [
    # =========================================================================
    # Workout tools
    # =========================================================================
    Tool(
        name="get-workouts",
        description=(
            "Get a list of workouts with optional date filtering and pagination. "
            "Returns workout summaries including title, ID, date, and exercise count."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "startDate": {
                    "type": "string",
                    "description": "ISO 8601 date string (YYYY-MM-DD) for filtering workouts from this date",
                },
                "endDate": {
                    "type": "string",
                    "description": "ISO 8601 date string (YYYY-MM-DD) for filtering workouts until this date",
                },
                **_paging_schema("workouts", 10)["properties"],
            },
        },
    ),
    Tool(
        name="get-workout",
        description=(
            "Get detailed information about a specific workout by ID. Returns full workout details "
            "including all exercises, sets, weights, reps, and notes."
        ),
        inputSchema=_id_schema("The unique workout ID"),
    ),
    Tool(
        name="create-workout",
        description=(
            "Create a new workout with exercises and sets. "
            "Requires start time, end time, and at least one exercise with sets."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": 'Workout title (e.g., "Push Day", "Leg Workout")'},
                "description": {"type": "string", "description": "Optional workout description"},
                "start_time": {"type": "string", "description": "ISO 8601 datetime string when workout started"},
                "end_time": {"type": "string", "description": "ISO 8601 datetime string when workout ended"},
                "exercises": {
                    "type": "array",
                    "description": "Array of exercises performed in this workout",
                    "items": _EXERCISE_SCHEMA,
                },
            },
            "required": ["title", "start_time", "end_time", "exercises"],
        },
    ),
    Tool(
        name="update-workout",
        description=(
            "Update an existing workout. You can update title, description, times, or exercises. "
            "Only provide fields you want to change."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The unique workout ID to update"},
                "title": {"type": "string", "description": "New workout title"},
                "description": {"type": "string", "description": "New workout description"},
                "start_time": {"type": "string", "description": "New ISO 8601 datetime for start time"},
                "end_time": {"type": "string", "description": "New ISO 8601 datetime for end time"},
                "exercises": {
                    "type": "array",
                    "description": "New exercises array (replaces all existing exercises)",
                    "items": _EXERCISE_SCHEMA,
                },
            },
            "required": ["id"],
        },
    ),
    Tool(
        name="delete-workout",
        description="Delete a workout by ID. This action cannot be undone.",
        inputSchema=_id_schema("The unique workout ID to delete"),
    ),
    Tool(
        name="get-workout-count",
        description="Get the total count of all workouts in your account. Useful for stats and tracking progress.",
        inputSchema=_EMPTY_SCHEMA,
    ),
    Tool(
        name="get-workout-events",
        description="Get workout update/delete events since a specific date. Useful for syncing or tracking changes.",
        inputSchema=_id_schema("ISO 8601 date string (YYYY-MM-DD) to get events from", name="sinceDate"),
    ),
    # =========================================================================
    # Routine tools
    # =========================================================================
    Tool(
        name="get-routines",
        description=(
            "Get a list of all saved workout routines/templates. "
            "Returns routine summaries including title, ID, and exercise count."
        ),
        inputSchema=_paging_schema("routines", 50),
    ),
    Tool(
        name="get-routine",
        description=(
            "Get detailed information about a specific routine by ID. "
            "Returns full routine details including all exercises and planned sets."
        ),
        inputSchema=_id_schema("The unique routine ID"),
    ),
    Tool(
        name="create-routine",
        description="Create a new workout routine/template with planned exercises and sets.",
        inputSchema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": 'Routine title (e.g., "Upper Body A")'},
                "folder_id": {"type": "string", "description": "Optional folder ID to organize the routine"},
                "exercises": {
                    "type": "array",
                    "description": "Array of exercises in this routine",
                    "items": _EXERCISE_SCHEMA,
                },
            },
            "required": ["title", "exercises"],
        },
    ),
    Tool(
        name="update-routine",
        description=(
            "Update an existing routine. You can update title, folder, or exercises. "
            "Only provide fields you want to change."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The unique routine ID to update"},
                "title": {"type": "string", "description": "New routine title"},
                "folder_id": {"type": "string", "description": "New folder ID"},
                "exercises": {
                    "type": "array",
                    "description": "New exercises array (replaces all existing exercises)",
                    "items": _EXERCISE_SCHEMA,
                },
            },
            "required": ["id"],
        },
    ),
    Tool(
        name="delete-routine",
        description="Delete a routine by ID. This action cannot be undone.",
        inputSchema=_id_schema("The unique routine ID to delete"),
    ),
    # =========================================================================
    # Exercise tools
    # =========================================================================
    Tool(
        name="get-exercise-templates",
        description=(
            "Browse available exercise templates including both standard and custom exercises. "
            "Use this to find exercise IDs for creating workouts and routines."
        ),
        inputSchema=_paging_schema("exercises", 50),
    ),
    Tool(
        name="get-exercise-template",
        description=(
            "Get detailed information about a specific exercise template by ID. "
            "Returns exercise name, muscle groups, equipment, and movement pattern."
        ),
        inputSchema=_id_schema("The unique exercise template ID"),
    ),
    Tool(
        name="get-exercise-progress",
        description=(
            "Track progress for a specific exercise over time. "
            "Returns historical data showing sets, weights, and reps for each workout."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "exercise_template_id": {"type": "string", "description": "The exercise template ID to track"},
                "start_date": {
                    "type": "string",
                    "description": "ISO 8601 date string (YYYY-MM-DD) for start of date range",
                },
                "end_date": {
                    "type": "string",
                    "description": "ISO 8601 date string (YYYY-MM-DD) for end of date range",
                },
                "limit": {
                    "type": "number",
                    "description": "Max number of progress entries to return (default: 50, max: 100)",
                    "default": 50,
                },
            },
            "required": ["exercise_template_id"],
        },
    ),
    Tool(
        name="get-exercise-stats",
        description=(
            "Get personal records and statistics for a specific exercise. "
            "Returns PRs, estimated 1RM, total volume, and total reps."
        ),
        inputSchema=_id_schema("The exercise template ID to get stats for", name="exercise_template_id"),
    ),
    # =========================================================================
    # Routine folder tools
    # =========================================================================
    Tool(
        name="get-routine-folders",
        description="Get all routine folders used to organize routines.",
        inputSchema=_EMPTY_SCHEMA,
    ),
    Tool(
        name="get-routine-folder",
        description="Get details of a specific routine folder by ID.",
        inputSchema=_id_schema("The unique folder ID"),
    ),
    Tool(
        name="create-routine-folder",
        description="Create a new routine folder.",
        inputSchema=_id_schema('Folder title (e.g., "Strength Program")', name="title"),
    ),
    Tool(
        name="update-routine-folder",
        description="Rename an existing routine folder.",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The unique folder ID to update"},
                "title": {"type": "string", "description": "New folder title"},
            },
            "required": ["id", "title"],
        },
    ),
    Tool(
        name="delete-routine-folder",
        description="Delete a routine folder by ID. This action cannot be undone.",
        inputSchema=_id_schema("The unique folder ID to delete"),
    ),
    # =========================================================================
    # Webhook tools
    # =========================================================================
    Tool(
        name="get-webhook-subscription",
        description="Get the current webhook subscription, if any.",
        inputSchema=_EMPTY_SCHEMA,
    ),
    Tool(
        name="create-webhook-subscription",
        description="Subscribe a URL to workout and routine change events.",
        inputSchema={
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "HTTPS URL that will receive event POSTs"},
                "events": {
                    "type": "array",
                    "description": "Events to subscribe to",
                    "items": {"type": "string", "enum": WEBHOOK_EVENTS},
                },
            },
            "required": ["url", "events"],
        },
    ),
    Tool(
        name="delete-webhook-subscription",
        description="Remove the current webhook subscription.",
        inputSchema=_EMPTY_SCHEMA,
    ),
]
