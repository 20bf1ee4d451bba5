# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Validated inputs for the Hevy API.

Free-text fields are stripped of HTML and truncated after length checks.
``validate_input`` converts pydantic errors into ValidationException so tool
handlers can report them uniformly.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Any, Literal, TypeVar

import bleach
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, HttpUrl, ValidationError

from hevy_mcp.core.exceptions import ValidationException

SetType = Literal["normal", "warmup", "dropset", "failure"]
WebhookEvent = Literal[
    "workout.created",
    "workout.updated",
    "workout.deleted",
    "routine.created",
    "routine.updated",
    "routine.deleted",
]


def sanitize_text(value: str, max_length: int = 10000) -> str:
    """Strip all HTML tags and truncate."""
    cleaned = bleach.clean(value, tags=[], attributes={}, strip=True, strip_comments=True)
    return cleaned[:max_length]


def _sanitized(max_length: int) -> AfterValidator:
    return AfterValidator(lambda v: sanitize_text(v, max_length))


Title = Annotated[str, Field(min_length=1, max_length=200), _sanitized(200)]
LongText = Annotated[str, Field(max_length=5000), _sanitized(5000)]


def _check_datetime(value: str) -> str:
    try:
        datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid ISO 8601 datetime: {value!r}") from e
    return value


IsoDatetime = Annotated[str, AfterValidator(_check_datetime)]


class HevyModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_api(self) -> dict[str, Any]:
        """Serialize for a request body, leaving out unset fields."""
        return self.model_dump(mode="json", exclude_unset=True, by_alias=False)


class ExerciseSet(HevyModel):
    type: SetType
    weight_kg: float | None = None
    reps: int | None = None
    distance_meters: float | None = None
    duration_seconds: float | None = None
    rpe: float | None = Field(default=None, ge=1, le=10)


class WorkoutExercise(HevyModel):
    exercise_template_id: str
    superset_id: str | None = None
    notes: LongText | None = None
    sets: list[ExerciseSet]


RoutineExercise = WorkoutExercise


class CreateWorkoutInput(HevyModel):
    title: Title
    description: LongText | None = None
    start_time: IsoDatetime
    end_time: IsoDatetime
    exercises: list[WorkoutExercise]


class UpdateWorkoutInput(HevyModel):
    title: Title | None = None
    description: LongText | None = None
    start_time: IsoDatetime | None = None
    end_time: IsoDatetime | None = None
    exercises: list[WorkoutExercise] | None = None


class CreateRoutineInput(HevyModel):
    title: Title
    folder_id: str | None = None
    exercises: list[RoutineExercise]


class UpdateRoutineInput(HevyModel):
    title: Title | None = None
    folder_id: str | None = None
    exercises: list[RoutineExercise] | None = None


class CreateFolderInput(HevyModel):
    title: Title


class PaginationParams(HevyModel):
    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=50, ge=1, le=100, alias="pageSize")


class WorkoutQueryParams(PaginationParams):
    page_size: int = Field(default=10, ge=1, le=100, alias="pageSize")
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")


class ExerciseProgressParams(HevyModel):
    exercise_template_id: str = Field(min_length=1)
    start_date: str | None = None
    end_date: str | None = None
    limit: int = Field(default=50, ge=1, le=100)


class CreateWebhookInput(HevyModel):
    url: HttpUrl
    events: list[WebhookEvent]


M = TypeVar("M", bound=BaseModel)


def validate_input(model: type[M], data: dict[str, Any] | None) -> M:
    """Validate tool arguments against ``model``.

    Raises:
        ValidationException: With the pydantic error list as details.
    """
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        errors = json.loads(e.json(include_url=False, include_input=False))
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "input" for err in errors)
        raise ValidationException(f"Invalid {fields}", errors=errors) from e
