# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Binding between a transport's duplex stream and the MCP protocol engine."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from mcp.server import Server

logger = logging.getLogger(__name__)


class ProtocolEngine(Protocol):
    """Anything that can serve the protocol over a pair of memory streams.

    ``read_stream`` yields inbound messages (or exceptions to report),
    ``write_stream`` receives outbound messages. ``run`` returns when the
    read stream is exhausted.
    """

    async def run(self, read_stream: Any, write_stream: Any) -> None: ...


class McpEngine:
    """ProtocolEngine backed by the ``mcp`` SDK's low-level Server."""

    def __init__(self, server: Server) -> None:
        self.server = server

    @property
    def name(self) -> str:
        return self.server.name

    async def run(self, read_stream: Any, write_stream: Any) -> None:
        await self.server.run(
            read_stream,
            write_stream,
            self.server.create_initialization_options(),
        )
