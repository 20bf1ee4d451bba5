"""The HTTP transport driving the real MCP server against a mocked Hevy API."""

from __future__ import annotations

import httpx
import pytest

from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.mcp import create_server
from hevy_mcp.server.app import create_app
from hevy_mcp.server.engine import McpEngine

from .helpers import StreamClient, jsonrpc_notification, jsonrpc_request, make_settings

INITIALIZE_PARAMS = {
    "protocolVersion": "2025-06-18",
    "capabilities": {},
    "clientInfo": {"name": "pytest", "version": "1.0"},
}


def hevy_api(request: httpx.Request) -> httpx.Response:
    assert request.headers["api-key"] == "test-api-key"
    if request.url.path == "/v1/workouts/count":
        return httpx.Response(200, json={"workout_count": 42})
    return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
async def hevy_client():
    async with HevyClient(api_key="test-api-key", transport=httpx.MockTransport(hevy_api)) as client:
        yield client


@pytest.fixture
def mcp_app(hevy_client):
    engine = McpEngine(create_server(hevy_client))
    return create_app(make_settings(), engine=engine)


async def test_initialize_and_call_tool(mcp_app, http_factory):
    async with StreamClient(mcp_app) as stream, http_factory(mcp_app) as http:
        await stream.next_event()
        headers = {"Mcp-Session-Id": stream.session_id}

        response = await http.post("/mcp", json=jsonrpc_request("initialize", 1, INITIALIZE_PARAMS), headers=headers)
        assert response.status_code == 200
        result = response.json()["result"]
        assert result["serverInfo"]["name"] == "hevy-mcp"
        assert "tools" in result["capabilities"]

        response = await http.post("/mcp", json=jsonrpc_notification(), headers=headers)
        assert response.status_code == 202

        response = await http.post("/mcp", json=jsonrpc_request("tools/list", 2), headers=headers)
        tools = response.json()["result"]["tools"]
        assert len(tools) == 24

        response = await http.post(
            "/mcp",
            json=jsonrpc_request("tools/call", 3, {"name": "get-workout-count", "arguments": {}}),
            headers=headers,
        )
        result = response.json()["result"]
        assert result["isError"] is False
        assert result["content"][0]["text"] == "Total workouts: 42"


async def test_upstream_failure_is_tool_error(mcp_app, http_factory):
    async with StreamClient(mcp_app) as stream, http_factory(mcp_app) as http:
        await stream.next_event()
        headers = {"Mcp-Session-Id": stream.session_id}
        await http.post("/mcp", json=jsonrpc_request("initialize", 1, INITIALIZE_PARAMS), headers=headers)
        await http.post("/mcp", json=jsonrpc_notification(), headers=headers)

        response = await http.post(
            "/mcp",
            json=jsonrpc_request("tools/call", 2, {"name": "get-workout", "arguments": {"id": "w1"}}),
            headers=headers,
        )
        result = response.json()["result"]
        assert result["isError"] is True
        assert result["content"][0]["text"].startswith("Hevy API Error: Hevy API error (404)")
