# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Command-line entry point for the Hevy MCP server."""

from __future__ import annotations

import argparse
import logging
import sys

import anyio

from hevy_mcp.core.exceptions import ConfigurationError
from hevy_mcp.core.logging import configure_logging
from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.mcp import create_server

from .app import serve
from .config import ServerSettings, get_package_version, load_settings
from .engine import McpEngine
from .stdio import run_stdio

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Hevy MCP server (stdio and HTTP/SSE transports)",
        prog="hevy-mcp-server",
    )
    parser.add_argument(
        "--transport",
        "-t",
        choices=["stdio", "sse", "both"],
        default=None,
        help="Transport to serve (default: TRANSPORT or stdio)",
    )
    parser.add_argument("--host", default=None, help="HTTP bind host (default: HOST or 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=None, help="HTTP bind port (default: PORT or 3000)")
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_package_version()}")
    return parser


def settings_from_args(args: argparse.Namespace) -> ServerSettings:
    """Load settings, letting explicit command-line flags win over the environment."""
    overrides = {
        "transport": args.transport,
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
    }
    return load_settings(**{key: value for key, value in overrides.items() if value is not None})


async def serve_transports(settings: ServerSettings) -> None:
    """Run the configured transport(s) with one shared Hevy client and engine."""
    async with HevyClient(
        api_key=settings.hevy_api_key,
        base_url=settings.hevy_api_base_url,
        timeout=settings.hevy_request_timeout,
    ) as client:
        engine = McpEngine(create_server(client))

        if settings.transport == "stdio":
            await run_stdio(engine)
        elif settings.transport == "sse":
            await serve(settings, engine)
        else:
            async with anyio.create_task_group() as tg:
                tg.start_soon(run_stdio, engine)
                await serve(settings, engine)
                tg.cancel_scope.cancel()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Configuration error: {e.message}")
        return 1

    configure_logging(settings.log_level, log_file=settings.log_file, log_format=settings.log_format)
    logger.info(f"Starting hevy-mcp {get_package_version()} (transport: {settings.transport})")

    try:
        anyio.run(serve_transports, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
