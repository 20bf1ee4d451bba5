# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Webhook subscription handlers."""

from __future__ import annotations

from typing import Any

from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.hevy.models import CreateWebhookInput, validate_input

from ..formatters import format_webhook


async def get_webhook_subscription(client: HevyClient, arguments: dict[str, Any]) -> str:
    return format_webhook(await client.get_webhook_subscription())


async def create_webhook_subscription(client: HevyClient, arguments: dict[str, Any]) -> str:
    data = validate_input(CreateWebhookInput, arguments)
    subscription = await client.create_webhook_subscription(data.to_api())
    return f"✅ Webhook subscription created successfully!\n\n{format_webhook(subscription)}"


async def delete_webhook_subscription(client: HevyClient, arguments: dict[str, Any]) -> str:
    await client.delete_webhook_subscription()
    return "✅ Webhook subscription deleted successfully!"
