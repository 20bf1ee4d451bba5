# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Local-pipe transport: the protocol engine over stdin/stdout."""

from __future__ import annotations

import logging

from mcp.server.stdio import stdio_server

from .engine import ProtocolEngine

logger = logging.getLogger(__name__)


async def run_stdio(engine: ProtocolEngine) -> None:
    """Serve the engine over stdio until stdin closes.

    Logging must stay on stderr while this runs; stdout carries the protocol.
    """
    logger.info("Serving MCP over stdio")
    async with stdio_server() as (read_stream, write_stream):
        await engine.run(read_stream, write_stream)
    logger.info("stdio transport closed")
