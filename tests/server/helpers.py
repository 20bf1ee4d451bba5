"""Fake engines and an in-process stream client for transport tests."""

from __future__ import annotations

import asyncio
from typing import Any

from mcp import types
from mcp.shared.message import SessionMessage
from starlette.applications import Starlette

from hevy_mcp.server.config import ServerSettings


# ============================================================================
# Fake protocol engines
# ============================================================================


class EchoEngine:
    """Answers every request with ``{"echo": <method>}``; records everything received."""

    def __init__(self, respond: bool = True) -> None:
        self.respond = respond
        self.received: list[types.JSONRPCMessage] = []
        self.runs = 0

    async def run(self, read_stream: Any, write_stream: Any) -> None:
        self.runs += 1
        async with write_stream:
            async for item in read_stream:
                if isinstance(item, Exception):
                    continue
                message = item.message
                self.received.append(message)
                root = message.root
                if self.respond and isinstance(root, types.JSONRPCRequest):
                    reply = types.JSONRPCResponse(jsonrpc="2.0", id=root.id, result={"echo": root.method})
                    await write_stream.send(SessionMessage(types.JSONRPCMessage(reply)))


def jsonrpc_request(method: str = "ping", request_id: int | str = 1, params: dict | None = None) -> dict:
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


def jsonrpc_notification(method: str = "notifications/initialized") -> dict:
    return {"jsonrpc": "2.0", "method": method}


# ============================================================================
# Direct ASGI stream client
# ============================================================================


class StreamClient:
    """Holds one ``GET <sse_path>`` open against the ASGI app, in-process.

    Collects ``event:`` frames into a queue and counts heartbeat comments.
    Disconnects on exit and waits for the response to finish tearing down.
    """

    def __init__(
        self,
        app: Starlette,
        path: str = "/mcp",
        headers: dict[str, str] | None = None,
        client: tuple[str, int] = ("127.0.0.1", 50000),
    ) -> None:
        self.app = app
        self.path = path
        self.request_headers = headers or {}
        self.client = client
        self.status: int | None = None
        self.headers: dict[str, str] = {}
        self.body = b""
        self.heartbeats = 0
        self.events: asyncio.Queue[tuple[str, str]] = asyncio.Queue()
        self.send_error: BaseException | None = None
        self._buffer = b""
        self._started = asyncio.Event()
        self._finished = asyncio.Event()
        self._disconnect = asyncio.Event()
        self._task: asyncio.Task | None = None

    def _scope(self) -> dict[str, Any]:
        headers = [(b"host", b"testserver")]
        headers.extend((k.lower().encode(), v.encode()) for k, v in self.request_headers.items())
        return {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "path": self.path,
            "raw_path": self.path.encode(),
            "query_string": b"",
            "root_path": "",
            "headers": headers,
            "client": self.client,
            "server": ("testserver", 80),
        }

    async def _receive(self) -> dict[str, Any]:
        await self._disconnect.wait()
        return {"type": "http.disconnect"}

    async def _send(self, message: dict[str, Any]) -> None:
        if self.send_error is not None:
            raise self.send_error
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = {k.decode().lower(): v.decode() for k, v in message.get("headers", [])}
            self._started.set()
        elif message["type"] == "http.response.body":
            chunk = message.get("body", b"")
            self.body += chunk
            self._buffer += chunk
            self._parse()
            if not message.get("more_body", False):
                self._finished.set()

    def _parse(self) -> None:
        while b"\n\n" in self._buffer:
            frame, self._buffer = self._buffer.split(b"\n\n", 1)
            text = frame.decode()
            if text.startswith(":"):
                self.heartbeats += 1
                continue
            event = "message"
            data: list[str] = []
            for line in text.split("\n"):
                if line.startswith("event: "):
                    event = line[len("event: ") :]
                elif line.startswith("data: "):
                    data.append(line[len("data: ") :])
            self.events.put_nowait((event, "\n".join(data)))

    @property
    def session_id(self) -> str | None:
        return self.headers.get("mcp-session-id")

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def next_event(self, timeout: float = 2.0) -> tuple[str, str]:
        return await asyncio.wait_for(self.events.get(), timeout)

    def disconnect(self) -> None:
        self._disconnect.set()

    async def wait_closed(self, timeout: float = 2.0) -> None:
        assert self._task is not None
        await asyncio.wait_for(asyncio.shield(self._task), timeout)

    async def __aenter__(self) -> StreamClient:
        self._task = asyncio.create_task(self.app(self._scope(), self._receive, self._send))
        started = asyncio.create_task(self._started.wait())
        await asyncio.wait({started, self._task}, timeout=2.0, return_when=asyncio.FIRST_COMPLETED)
        started.cancel()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.disconnect()
        await self.wait_closed()


def make_settings(**overrides: Any) -> ServerSettings:
    """Server settings for tests: SSE transport, no auth, short message timeout."""
    values: dict[str, Any] = {
        "hevy_api_key": "test-api-key",
        "auth_token": None,
        "transport": "sse",
        "heartbeat_interval": 60000,
        "message_timeout": 2.0,
        "production": False,
        "environment": "test",
    }
    values.update(overrides)
    return ServerSettings(**values)
