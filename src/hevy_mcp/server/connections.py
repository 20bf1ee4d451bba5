# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Streaming connections and the routing table that maps sessions to them.

A StreamConnection is one physical event stream. It owns the pair of memory
streams bound to the protocol engine: POSTed messages go into the inbound
stream in arrival order, and the engine's output comes back on the outbound
stream to be written to the client.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import threading
import uuid

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp import types
from mcp.shared.message import SessionMessage

from hevy_mcp.core.exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)

INBOUND_BUFFER_SIZE = 32


class ConnectionState(enum.Enum):
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class StreamConnection:
    """One physical duplex stream serving a session."""

    def __init__(self, session_id: str, buffer_size: int = INBOUND_BUFFER_SIZE) -> None:
        self.session_id = session_id
        self.connection_id = uuid.uuid4().hex
        self.state = ConnectionState.OPENING
        self.heartbeat_scope: anyio.CancelScope | None = None

        self._inbound_send: MemoryObjectSendStream[SessionMessage | Exception]
        self.inbound: MemoryObjectReceiveStream[SessionMessage | Exception]
        self._inbound_send, self.inbound = anyio.create_memory_object_stream(buffer_size)

        self.outbound: MemoryObjectSendStream[SessionMessage]
        self._outbound_receive: MemoryObjectReceiveStream[SessionMessage]
        self.outbound, self._outbound_receive = anyio.create_memory_object_stream(buffer_size)

        self._pending: dict[types.RequestId, asyncio.Future[types.JSONRPCMessage]] = {}

    def __repr__(self) -> str:
        return f"StreamConnection(session_id={self.session_id!r}, id={self.connection_id[:8]}, state={self.state.value})"

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN

    @property
    def outbound_messages(self) -> MemoryObjectReceiveStream[SessionMessage]:
        """Engine output, in the order it was produced."""
        return self._outbound_receive

    async def deliver(
        self,
        message: types.JSONRPCMessage,
        wait_timeout: float | None = None,
    ) -> types.JSONRPCMessage | None:
        """Hand a message to the engine, optionally waiting for its response.

        Messages are queued in call order. When ``wait_timeout`` is given and
        the message is a request, waits up to that many seconds for the
        matching response and returns it; returns None on timeout or for
        messages that expect no response.

        Raises:
            SessionNotFoundError: If the connection is closed, or closes
                while waiting.
        """
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            raise SessionNotFoundError(self.session_id, "Session connection closed")

        future: asyncio.Future[types.JSONRPCMessage] | None = None
        request_id = None
        if wait_timeout is not None and isinstance(message.root, types.JSONRPCRequest):
            request_id = message.root.id
            if request_id not in self._pending:
                future = asyncio.get_running_loop().create_future()
                self._pending[request_id] = future

        try:
            await self._inbound_send.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            self._discard(request_id, future)
            raise SessionNotFoundError(self.session_id, "Session connection closed") from e

        if future is None:
            return None

        try:
            with anyio.move_on_after(wait_timeout):
                return await asyncio.shield(future)
        finally:
            self._discard(request_id, future)

        logger.debug(f"Request {request_id} on {self.session_id} outlived {wait_timeout}s, answering on the stream")
        return None

    def resolve(self, message: types.JSONRPCMessage) -> bool:
        """Complete the waiter for a response or error, if there is one."""
        root = message.root
        if not isinstance(root, types.JSONRPCResponse | types.JSONRPCError):
            return False
        future = self._pending.pop(root.id, None)
        if future is None or future.done():
            return False
        future.set_result(message)
        return True

    def _discard(self, request_id: types.RequestId | None, future: asyncio.Future | None) -> None:
        if future is not None and self._pending.get(request_id) is future:
            del self._pending[request_id]

    def close(self) -> None:
        """Release the engine binding: close both streams and fail waiters."""
        self._inbound_send.close()
        self.inbound.close()
        self.outbound.close()
        self._outbound_receive.close()

        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(SessionNotFoundError(self.session_id, "Session connection closed"))
                # Mark retrieved so an abandoned waiter does not warn at GC
                future.exception()


class ConnectionRegistry:
    """Routing table from session id to the connection currently serving it.

    At most one connection is registered per session; registering another
    supersedes the first.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: dict[str, StreamConnection] = {}

    def register(self, connection: StreamConnection) -> StreamConnection | None:
        """Register a connection, returning the one it superseded (if any)."""
        with self._lock:
            previous = self._connections.get(connection.session_id)
            self._connections[connection.session_id] = connection

        if previous is not None and previous is not connection:
            logger.info(
                f"Connection {connection.connection_id[:8]} supersedes "
                f"{previous.connection_id[:8]} for session {connection.session_id}"
            )
            return previous
        return None

    def unregister(self, connection: StreamConnection) -> bool:
        """Remove the entry for the connection's session if it still points at it."""
        with self._lock:
            if self._connections.get(connection.session_id) is connection:
                del self._connections[connection.session_id]
                return True
            return False

    def get(self, session_id: str) -> StreamConnection | None:
        with self._lock:
            return self._connections.get(session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._connections
