# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Text formatters for tool results.

Each formatter takes a Hevy API response dict and returns a markdown-ish
string suited to an agent reading it.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any


def format_number(value: float | int) -> str:
    """Render a number without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def capitalize_title(title: str | None) -> str:
    """Capitalize the first letter of each space-separated word."""
    if not title:
        return ""
    return " ".join(word[:1].upper() + word[1:].lower() for word in title.split(" "))


def _parse(iso_string: str | None) -> datetime | None:
    if not iso_string:
        return None
    try:
        return datetime.fromisoformat(iso_string)
    except ValueError:
        return None


def format_datetime(iso_string: str | None) -> str:
    """Format an ISO timestamp as e.g. ``Jan 15, 2024, 10:30 AM``."""
    dt = _parse(iso_string)
    if dt is None:
        return "Invalid Date"
    return f"{dt:%b} {dt.day}, {dt.year}, {dt:%I:%M %p}"


def format_date(iso_string: str | None) -> str:
    """Format an ISO timestamp as e.g. ``1/15/2024``."""
    dt = _parse(iso_string)
    if dt is None:
        return "Invalid Date"
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as ``1h 2m 3s``."""
    seconds = max(0, seconds)
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{format_number(secs)}s")
    return " ".join(parts)


def calculate_duration(start_time: str | None, end_time: str | None) -> str:
    start = _parse(start_time)
    end = _parse(end_time)
    if start is None or end is None:
        return "Unknown"
    return format_duration(int((end - start).total_seconds()))


def format_set(exercise_set: dict[str, Any]) -> str:
    """Format one set as ``normal • 100kg • 5 reps • RPE 8``."""
    parts = [str(exercise_set.get("type", "normal"))]

    if exercise_set.get("weight_kg") is not None:
        parts.append(f"{format_number(round(exercise_set['weight_kg'], 2))}kg")
    if exercise_set.get("reps") is not None:
        parts.append(f"{exercise_set['reps']} reps")
    if exercise_set.get("distance_meters") is not None:
        parts.append(f"{format_number(exercise_set['distance_meters'])}m")
    if exercise_set.get("duration_seconds") is not None:
        parts.append(format_duration(exercise_set["duration_seconds"]))
    if exercise_set.get("rpe") is not None:
        parts.append(f"RPE {format_number(exercise_set['rpe'])}")

    return " • ".join(parts)


def _exercise_header(lines: list[str], idx: int, exercise: dict[str, Any]) -> None:
    lines.append(f"### {idx}. Exercise ID: {exercise.get('exercise_template_id')}")
    if exercise.get("superset_id"):
        lines.append(f"   *Superset ID: {exercise['superset_id']}*")
    if exercise.get("notes"):
        lines.append(f"   *Notes: {exercise['notes']}*")


def format_workout(workout: dict[str, Any]) -> str:
    """Format a workout with its exercises and sets."""
    lines = [f"# {capitalize_title(workout.get('title')) or 'Untitled Workout'}"]
    if workout.get("description"):
        lines.append(workout["description"])
    lines.append(f"**Started:** {format_datetime(workout.get('start_time'))}")
    lines.append(f"**Ended:** {format_datetime(workout.get('end_time'))}")
    lines.append(f"**Duration:** {calculate_duration(workout.get('start_time'), workout.get('end_time'))}")
    lines.append("")
    lines.append("## Exercises")

    exercises = workout.get("exercises")
    if not isinstance(exercises, list):
        lines.append("No exercises recorded.")
        return "\n".join(lines)

    for idx, exercise in enumerate(exercises, 1):
        _exercise_header(lines, idx, exercise)
        lines.append("   **Sets:**")
        for set_idx, exercise_set in enumerate(exercise.get("sets") or [], 1):
            lines.append(f"   {set_idx}. {format_set(exercise_set)}")
        lines.append("")

    return "\n".join(lines)


def format_routine(routine: dict[str, Any]) -> str:
    """Format a routine with its planned exercises."""
    lines = [f"# {capitalize_title(routine.get('title')) or 'Untitled Routine'}"]
    if routine.get("folder_id"):
        lines.append(f"**Folder ID:** {routine['folder_id']}")
    lines.append("")
    lines.append("## Exercises")

    exercises = routine.get("exercises")
    if not isinstance(exercises, list):
        lines.append("No exercises defined.")
        return "\n".join(lines)

    for idx, exercise in enumerate(exercises, 1):
        _exercise_header(lines, idx, exercise)
        lines.append(f"   **{len(exercise.get('sets') or [])} sets planned**")
        lines.append("")

    return "\n".join(lines)


def format_exercise_template(exercise: dict[str, Any]) -> str:
    custom = " (Custom)" if exercise.get("is_custom") else ""
    lines = [
        f"**{exercise.get('title')}**{custom}",
        f"Primary: {exercise.get('primary_muscle_group')}",
    ]
    secondary = exercise.get("secondary_muscle_groups") or []
    if secondary:
        lines.append(f"Secondary: {', '.join(secondary)}")
    if exercise.get("equipment"):
        lines.append(f"Equipment: {exercise['equipment']}")
    return "\n".join(lines)


def format_workout_list(workouts: list[dict[str, Any]]) -> str:
    if not workouts:
        return "No workouts found."

    lines = [f"Found {len(workouts)} workout(s):\n"]
    for idx, workout in enumerate(workouts, 1):
        lines.append(f"{idx}. **{capitalize_title(workout.get('title'))}**")
        lines.append(f"   ID: {workout.get('id')}")
        lines.append(f"   Date: {format_datetime(workout.get('start_time'))}")
        lines.append(f"   Exercises: {len(workout.get('exercises') or [])}")
        lines.append("")
    return "\n".join(lines)


def format_routine_list(routines: list[dict[str, Any]]) -> str:
    if not routines:
        return "No routines found."

    lines = [f"Found {len(routines)} routine(s):\n"]
    for idx, routine in enumerate(routines, 1):
        lines.append(f"{idx}. **{capitalize_title(routine.get('title'))}**")
        lines.append(f"   ID: {routine.get('id')}")
        lines.append(f"   Exercises: {len(routine.get('exercises') or [])}")
        lines.append("")
    return "\n".join(lines)


def format_exercise_template_list(exercises: list[dict[str, Any]]) -> str:
    if not exercises:
        return "No exercise templates found."

    lines = [f"Found {len(exercises)} exercise(s):\n"]
    for idx, exercise in enumerate(exercises, 1):
        custom = " (Custom)" if exercise.get("is_custom") else ""
        lines.append(f"{idx}. **{exercise.get('title')}**{custom}")
        lines.append(f"   ID: {exercise.get('id')}")
        lines.append(f"   Primary: {exercise.get('primary_muscle_group')}")
        lines.append("")
    return "\n".join(lines)


def format_exercise_stats(stats: dict[str, Any]) -> str:
    """Format personal records and totals for one exercise."""
    lines = ["# Exercise Statistics", f"Exercise ID: {stats.get('exercise_template_id')}", ""]

    if stats.get("one_rep_max_kg"):
        lines.append(f"**Estimated 1RM:** {format_number(stats['one_rep_max_kg'])} kg")
    if stats.get("total_volume_kg"):
        lines.append(f"**Total Volume:** {format_number(stats['total_volume_kg'])} kg")
    if stats.get("total_reps"):
        lines.append(f"**Total Reps:** {stats['total_reps']}")

    records = stats.get("personal_records") or []
    if records:
        lines.append("")
        lines.append("## Personal Records")
        for pr in records:
            lines.append(
                f"- **{pr.get('type')}**: {format_number(pr.get('value', 0))} {pr.get('unit', '')} "
                f"({format_date(pr.get('date'))})"
            )

    return "\n".join(lines)


def format_exercise_progress(progress: list[dict[str, Any]]) -> str:
    if not progress:
        return "No progress data found for this exercise in the specified date range."
    return f"Progress data for exercise:\n\n{json.dumps(progress, indent=2)}"


def format_folder(folder: dict[str, Any]) -> str:
    lines = [f"# {folder.get('title')}", f"**ID:** {folder.get('id')}"]
    if folder.get("created_at"):
        lines.append(f"**Created:** {format_datetime(folder['created_at'])}")
    if folder.get("updated_at"):
        lines.append(f"**Updated:** {format_datetime(folder['updated_at'])}")
    return "\n".join(lines)


def format_folder_list(folders: list[dict[str, Any]]) -> str:
    if not folders:
        return "No routine folders found."

    lines = [f"Found {len(folders)} folder(s):\n"]
    for idx, folder in enumerate(folders, 1):
        lines.append(f"{idx}. **{folder.get('title')}**")
        lines.append(f"   ID: {folder.get('id')}")
        if folder.get("created_at"):
            lines.append(f"   Created: {format_date(folder['created_at'])}")
        lines.append("")
    return "\n".join(lines)


def format_webhook(subscription: dict[str, Any] | None) -> str:
    if not subscription:
        return "No webhook subscription found."

    lines = ["# Webhook Subscription", f"**URL:** {subscription.get('url')}"]
    if subscription.get("id"):
        lines.append(f"**ID:** {subscription['id']}")
    events = subscription.get("events") or []
    if events:
        lines.append(f"**Events:** {', '.join(events)}")
    if "active" in subscription:
        lines.append(f"**Active:** {'yes' if subscription['active'] else 'no'}")
    if subscription.get("created_at"):
        lines.append(f"**Created:** {format_datetime(subscription['created_at'])}")
    return "\n".join(lines)
