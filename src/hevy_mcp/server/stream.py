# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Server-Sent Events response that serves one StreamConnection.

Runs, inside one task group for the lifetime of the HTTP response:

- the protocol engine, bound to the connection's memory streams
- an outbound pump writing engine output as ``message`` events
- the heartbeat, writing ``: heartbeat`` comments and touching the session
- a listener that ends everything when the client disconnects

Whichever of these finishes first ends the stream.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import anyio
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from .connections import ConnectionRegistry, ConnectionState, StreamConnection
from .engine import ProtocolEngine
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)

HEARTBEAT_FRAME = b": heartbeat\n\n"


def format_event(event: str, data: str) -> bytes:
    """Encode one SSE event frame."""
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in data.splitlines() or [""])
    return ("\n".join(lines) + "\n\n").encode("utf-8")


class StreamWriteError(Exception):
    """The client can no longer be written to."""


class SessionStreamResponse(Response):
    """Long-lived ``text/event-stream`` response bound to a connection.

    The connection is registered when the response starts and torn down,
    in a fixed order, on every exit path:

    1. cancel the heartbeat
    2. unregister the connection if the routing entry still points at it
    3. close the engine streams and fail pending waiters

    The session itself is left in place for the client to reconnect to.
    """

    media_type = "text/event-stream"

    def __init__(
        self,
        connection: StreamConnection,
        engine: ProtocolEngine,
        connections: ConnectionRegistry,
        sessions: SessionRegistry,
        endpoint_url: str,
        heartbeat_interval: float,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.connection = connection
        self.engine = engine
        self.connections = connections
        self.sessions = sessions
        self.endpoint_url = endpoint_url
        self.heartbeat_interval = heartbeat_interval
        self.status_code = 200
        self.background = None
        base_headers = {
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
            "Mcp-Session-Id": connection.session_id,
        }
        if headers:
            base_headers.update(headers)
        self.init_headers(base_headers)

    async def _write(self, send: Send, chunk: bytes) -> None:
        try:
            await send({"type": "http.response.body", "body": chunk, "more_body": True})
        except (OSError, anyio.BrokenResourceError, anyio.ClosedResourceError) as e:
            raise StreamWriteError(str(e)) from e

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        conn = self.connection
        try:
            await send({"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers})
            await self._write(send, format_event("endpoint", self.endpoint_url))

            conn.state = ConnectionState.OPEN
            self.connections.register(conn)
            logger.info(f"Stream opened for session {conn.session_id} ({conn.connection_id[:8]})")

            async with anyio.create_task_group() as tg:
                tg.start_soon(self._run_engine, tg.cancel_scope)
                tg.start_soon(self._pump_outbound, send, tg.cancel_scope)
                tg.start_soon(self._heartbeat, send, tg.cancel_scope)
                tg.start_soon(self._listen_for_disconnect, receive, tg.cancel_scope)

            await send({"type": "http.response.body", "body": b"", "more_body": False})
        except (OSError, StreamWriteError):
            logger.debug(f"Stream for session {conn.session_id} could not be written, closing")
        finally:
            with anyio.CancelScope(shield=True):
                self._close()

    def _close(self) -> None:
        conn = self.connection
        conn.state = ConnectionState.CLOSING
        if conn.heartbeat_scope is not None:
            conn.heartbeat_scope.cancel()
        self.connections.unregister(conn)
        conn.close()
        conn.state = ConnectionState.CLOSED
        logger.info(f"Stream closed for session {conn.session_id} ({conn.connection_id[:8]})")

    async def _run_engine(self, scope: anyio.CancelScope) -> None:
        conn = self.connection
        try:
            await self.engine.run(conn.inbound, conn.outbound)
        except Exception:
            logger.exception(f"Protocol engine failed for session {conn.session_id}")
        finally:
            scope.cancel()

    async def _pump_outbound(self, send: Send, scope: anyio.CancelScope) -> None:
        conn = self.connection
        try:
            async for session_message in conn.outbound_messages:
                message = session_message.message
                conn.resolve(message)
                data = message.model_dump_json(by_alias=True, exclude_none=True)
                await self._write(send, format_event("message", data))
        except (StreamWriteError, anyio.ClosedResourceError):
            logger.debug(f"Outbound write failed for session {conn.session_id}")
        finally:
            scope.cancel()

    async def _heartbeat(self, send: Send, scope: anyio.CancelScope) -> None:
        conn = self.connection
        with anyio.CancelScope() as heartbeat_scope:
            conn.heartbeat_scope = heartbeat_scope
            while True:
                await anyio.sleep(self.heartbeat_interval)
                try:
                    await self._write(send, HEARTBEAT_FRAME)
                except StreamWriteError:
                    logger.debug(f"Heartbeat failed for session {conn.session_id}, closing stream")
                    scope.cancel()
                    return
                self.sessions.touch(conn.session_id)

    async def _listen_for_disconnect(self, receive: Receive, scope: anyio.CancelScope) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
        scope.cancel()
