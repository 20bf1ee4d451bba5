"""Tests for hevy_mcp.hevy.client, using httpx.MockTransport for the API."""

from __future__ import annotations

import json

import httpx
import pytest

from hevy_mcp.core.exceptions import UpstreamError
from hevy_mcp.hevy.client import HevyClient, _extract_error_message


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, json={})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
async def make_client():
    clients: list[HevyClient] = []

    def factory(*responses: httpx.Response, **kwargs) -> tuple[HevyClient, Recorder]:
        recorder = Recorder(*responses)
        client = HevyClient(api_key="test-key", transport=httpx.MockTransport(recorder), **kwargs)
        clients.append(client)
        return client, recorder

    yield factory
    for client in clients:
        await client.aclose()


# ============================================================================
# Configuration
# ============================================================================


class TestConstruction:
    async def test_headers(self, make_client):
        client, recorder = make_client()
        await client.get_workout_count()
        assert recorder.last.headers["api-key"] == "test-key"
        assert recorder.last.headers["content-type"] == "application/json"

    async def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("HEVY_API_BASE_URL", "http://hevy.local/")
        monkeypatch.setenv("HEVY_API_KEY", "env-key")
        recorder = Recorder()
        async with HevyClient(transport=httpx.MockTransport(recorder)) as client:
            assert client.base_url == "http://hevy.local"
            assert client.api_key == "env-key"
            await client.get_workout_count()
        assert str(recorder.last.url) == "http://hevy.local/v1/workouts/count"

    def test_timeout_default(self):
        client = HevyClient(api_key="k")
        assert client.timeout == 60.0


# ============================================================================
# Requests
# ============================================================================


class TestRequests:
    async def test_get_workouts_drops_none_params(self, make_client):
        client, recorder = make_client(httpx.Response(200, json={"workouts": [{"id": "w1"}], "page": 1}))
        workouts = await client.get_workouts(page=2, page_size=5)
        assert workouts == [{"id": "w1"}]
        params = dict(recorder.last.url.params)
        assert params == {"page": "2", "pageSize": "5"}

    async def test_list_missing_key(self, make_client):
        client, _ = make_client(httpx.Response(200, json={"page": 1}))
        assert await client.get_routines() == []

    async def test_create_workout_wraps_body(self, make_client):
        client, recorder = make_client(httpx.Response(201, json={"id": "w1"}))
        result = await client.create_workout({"title": "Legs"})
        assert result == {"id": "w1"}
        assert recorder.last.method == "POST"
        assert json.loads(recorder.last.content) == {"workout": {"title": "Legs"}}

    @pytest.mark.parametrize(
        "call,method,path,key",
        [
            ("update_routine", "PUT", "/v1/routines/r1", "routine"),
            ("update_routine_folder", "PUT", "/v1/routine_folders/r1", "folder"),
            ("update_workout", "PUT", "/v1/workouts/r1", "workout"),
        ],
    )
    async def test_updates(self, make_client, call, method, path, key):
        client, recorder = make_client()
        await getattr(client, call)("r1", {"title": "x"})
        assert recorder.last.method == method
        assert recorder.last.url.path == path
        assert json.loads(recorder.last.content) == {key: {"title": "x"}}

    async def test_path_segment_escaped(self, make_client):
        client, recorder = make_client()
        await client.get_workout("a/b c")
        assert recorder.last.url.raw_path == b"/v1/workouts/a%2Fb%20c"

    async def test_delete_with_empty_body(self, make_client):
        client, recorder = make_client(httpx.Response(204))
        assert await client.delete_routine_folder("f1") is None
        assert recorder.last.method == "DELETE"

    async def test_non_json_body(self, make_client):
        client, _ = make_client(httpx.Response(200, text="plain text"))
        assert await client.get_exercise_stats("t1") == {"formatted": "plain text"}

    async def test_exercise_progress_params(self, make_client):
        client, recorder = make_client(httpx.Response(200, json={"progress": [{"date": "2024-01-01"}]}))
        progress = await client.get_exercise_progress("t1", start_date="2024-01-01", limit=10)
        assert progress == [{"date": "2024-01-01"}]
        assert recorder.last.url.path == "/v1/exercises/t1/progress"
        assert dict(recorder.last.url.params) == {"limit": "10", "start_date": "2024-01-01"}

    async def test_workout_events_since(self, make_client):
        client, recorder = make_client(httpx.Response(200, json={"events": [{"type": "updated"}]}))
        assert await client.get_workout_events("2024-01-01T00:00:00Z") == [{"type": "updated"}]
        assert recorder.last.url.params["since"] == "2024-01-01T00:00:00Z"


# ============================================================================
# Errors
# ============================================================================


class TestErrors:
    async def test_http_error_status(self, make_client):
        client, _ = make_client(httpx.Response(401, json={"error": "Invalid api key"}))
        with pytest.raises(UpstreamError) as exc_info:
            await client.get_workouts()
        assert exc_info.value.message == "Hevy API error (401): Invalid api key"
        assert exc_info.value.upstream_status == 401

    async def test_timeout(self):
        def raise_timeout(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = HevyClient(api_key="k", transport=httpx.MockTransport(raise_timeout))
        with pytest.raises(UpstreamError, match="timed out") as exc_info:
            await client.get_workout_count()
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)

    async def test_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = HevyClient(api_key="k", transport=httpx.MockTransport(refuse))
        with pytest.raises(UpstreamError, match="network error: refused"):
            await client.get_workout_count()

    async def test_missing_webhook_is_none(self, make_client):
        client, _ = make_client(httpx.Response(404, json={"error": "Not found"}))
        assert await client.get_webhook_subscription() is None

    async def test_webhook_other_errors_raise(self, make_client):
        client, _ = make_client(httpx.Response(500, text="oops"))
        with pytest.raises(UpstreamError, match=r"\(500\): oops"):
            await client.get_webhook_subscription()


class TestExtractErrorMessage:
    @pytest.mark.parametrize(
        "response,expected",
        [
            (httpx.Response(400, json={"error": {"message": "bad set"}}), "bad set"),
            (httpx.Response(400, json={"message": "bad title"}), "bad title"),
            (httpx.Response(400, json={"error": "plain"}), "plain"),
            (httpx.Response(400, json={"error": {"code": 7}}), '{"code": 7}'),
            (httpx.Response(400, json=["x"]), '["x"]'),
            (httpx.Response(400, text="not json"), "not json"),
            (httpx.Response(503, text=""), "Service Unavailable"),
        ],
    )
    def test_shapes(self, response, expected):
        assert _extract_error_message(response) == expected
