# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Async HTTP client for the Hevy REST API.

All tool handlers use this module to talk to Hevy. Failures surface as
UpstreamError with a ``Hevy API error (<status>): <message>`` message.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from hevy_mcp.core.config import DEFAULT_HEVY_API_BASE_URL, get_config
from hevy_mcp.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    """Escape an id for use as one URL path segment."""
    return quote(str(value), safe="")


def _extract_error_message(resp: httpx.Response) -> str:
    """Pull a readable message out of an error response body."""
    text = resp.text
    try:
        body = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return text or resp.reason_phrase

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
        if error:
            return error if isinstance(error, str) else json.dumps(error)
    return json.dumps(body)


class HevyClient:
    """Thin async client for the Hevy REST API.

    Args:
        api_key: Hevy API key, sent as the ``api-key`` header.
        base_url: API root (defaults to the configured base URL).
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        config = get_config()
        self.api_key = api_key if api_key is not None else config.hevy_api_key
        self.base_url = (base_url or config.hevy_api_base_url or DEFAULT_HEVY_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.hevy_request_timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
            headers={"api-key": self.api_key, "Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HevyClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _handle_response(self, resp: httpx.Response) -> Any:
        """Parse response, raise UpstreamError on failure."""
        if resp.is_error:
            message = _extract_error_message(resp)
            raise UpstreamError(f"Hevy API error ({resp.status_code}): {message}", status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError):
            return {"formatted": resp.text}

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute an HTTP request with connection error handling."""
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        logger.debug(f"Hevy API {method} {path}")
        try:
            resp = await self._client.request(method, path, params=params or None, json=body)
        except httpx.TimeoutException as e:
            raise UpstreamError("Hevy API request timed out", cause=e) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Hevy API request failed: network error: {e}", cause=e) from e
        return self._handle_response(resp)

    @staticmethod
    def _list(response: Any, key: str) -> list[dict[str, Any]]:
        if isinstance(response, dict):
            return response.get(key) or []
        return []

    # ===== Workouts =====

    async def get_workouts(
        self,
        page: int = 0,
        page_size: int = 10,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"page": page, "pageSize": page_size, "startDate": start_date, "endDate": end_date}
        return self._list(await self._request("GET", "/v1/workouts", params=params), "workouts")

    async def get_workout(self, workout_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/workouts/{_segment(workout_id)}")

    async def create_workout(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/workouts", body={"workout": data})

    async def update_workout(self, workout_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/v1/workouts/{_segment(workout_id)}", body={"workout": data})

    async def delete_workout(self, workout_id: str) -> None:
        await self._request("DELETE", f"/v1/workouts/{_segment(workout_id)}")

    async def get_workout_count(self) -> dict[str, Any]:
        return await self._request("GET", "/v1/workouts/count")

    async def get_workout_events(self, since: str) -> list[dict[str, Any]]:
        return self._list(await self._request("GET", "/v1/workouts/events", params={"since": since}), "events")

    # ===== Routines =====

    async def get_routines(self, page: int = 0, page_size: int = 50) -> list[dict[str, Any]]:
        params = {"page": page, "pageSize": page_size}
        return self._list(await self._request("GET", "/v1/routines", params=params), "routines")

    async def get_routine(self, routine_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/routines/{_segment(routine_id)}")

    async def create_routine(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/routines", body={"routine": data})

    async def update_routine(self, routine_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/v1/routines/{_segment(routine_id)}", body={"routine": data})

    async def delete_routine(self, routine_id: str) -> None:
        await self._request("DELETE", f"/v1/routines/{_segment(routine_id)}")

    # ===== Exercises =====

    async def get_exercise_templates(self, page: int = 0, page_size: int = 50) -> list[dict[str, Any]]:
        params = {"page": page, "pageSize": page_size}
        return self._list(await self._request("GET", "/v1/exercise_templates", params=params), "exercise_templates")

    async def get_exercise_template(self, template_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/exercise_templates/{_segment(template_id)}")

    async def get_exercise_progress(
        self,
        template_id: str,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        params = {"limit": limit, "start_date": start_date, "end_date": end_date}
        response = await self._request("GET", f"/v1/exercises/{_segment(template_id)}/progress", params=params)
        return self._list(response, "progress")

    async def get_exercise_stats(self, template_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/exercises/{_segment(template_id)}/stats")

    # ===== Routine folders =====

    async def get_routine_folders(self) -> list[dict[str, Any]]:
        return self._list(await self._request("GET", "/v1/routine_folders"), "folders")

    async def get_routine_folder(self, folder_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/routine_folders/{_segment(folder_id)}")

    async def create_routine_folder(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/routine_folders", body={"folder": data})

    async def update_routine_folder(self, folder_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/v1/routine_folders/{_segment(folder_id)}", body={"folder": data})

    async def delete_routine_folder(self, folder_id: str) -> None:
        await self._request("DELETE", f"/v1/routine_folders/{_segment(folder_id)}")

    # ===== Webhooks =====

    async def get_webhook_subscription(self) -> dict[str, Any] | None:
        """Return the current subscription, or None when there is none."""
        try:
            return await self._request("GET", "/v1/webhooks/subscription")
        except UpstreamError as e:
            if e.upstream_status == 404:
                return None
            raise

    async def create_webhook_subscription(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/webhooks/subscription", body={"webhook": data})

    async def delete_webhook_subscription(self) -> None:
        await self._request("DELETE", "/v1/webhooks/subscription")
