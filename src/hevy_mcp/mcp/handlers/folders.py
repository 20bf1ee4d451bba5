# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Routine folder handlers."""

from __future__ import annotations

from typing import Any

from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.hevy.models import CreateFolderInput, validate_input

from ..formatters import format_folder, format_folder_list
from ._utils import require_str, without


async def get_routine_folders(client: HevyClient, arguments: dict[str, Any]) -> str:
    return format_folder_list(await client.get_routine_folders())


async def get_routine_folder(client: HevyClient, arguments: dict[str, Any]) -> str:
    folder_id = require_str(arguments, "id", "folder ID")
    return format_folder(await client.get_routine_folder(folder_id))


async def create_routine_folder(client: HevyClient, arguments: dict[str, Any]) -> str:
    data = validate_input(CreateFolderInput, arguments)
    folder = await client.create_routine_folder(data.to_api())
    return f"✅ Folder created successfully!\n\n**{folder.get('title')}**\nID: {folder.get('id')}"


async def update_routine_folder(client: HevyClient, arguments: dict[str, Any]) -> str:
    folder_id = require_str(arguments, "id", "folder ID")
    data = validate_input(CreateFolderInput, without(arguments, "id"))
    folder = await client.update_routine_folder(folder_id, data.to_api())
    return f"✅ Folder updated successfully!\n\n**{folder.get('title')}**\nID: {folder.get('id')}"


async def delete_routine_folder(client: HevyClient, arguments: dict[str, Any]) -> str:
    folder_id = require_str(arguments, "id", "folder ID")
    await client.delete_routine_folder(folder_id)
    return f"✅ Folder deleted successfully! (ID: {folder_id})"
