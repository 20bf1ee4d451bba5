# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Hevy MCP - Model Context Protocol server for the Hevy workout tracker.

Exposes the Hevy REST API (workouts, routines, exercise templates, routine
folders, webhooks) as MCP tools, served over stdio or over HTTP with
Server-Sent Events.

Layout:
  core     settings, exceptions, logging
  hevy     REST client and input models
  mcp      tool definitions, handlers, text formatters
  server   transports: session registry, request gate, event streams

CLI entry point: ``hevy-mcp-server``
"""

from .server.config import get_package_version

__version__ = get_package_version()
