# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Core configuration - centralized config for the hevy_mcp package.

All environment-based configuration should flow through this module.
This provides a single source of truth and consistent defaults.

Usage:
    from hevy_mcp.core.config import get_config
    config = get_config()

    # Access settings
    api_base = config.hevy_api_base_url
    log_level = config.log_level
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVER_NAME = "hevy-mcp"
DEFAULT_HEVY_API_BASE_URL = "https://api.hevyapp.com"


class CoreSettings(BaseSettings):
    """Core configuration settings shared by every transport.

    Environment variable names follow the deployed server's conventions
    (``HEVY_API_KEY``, ``LOG_LEVEL``...) and carry no prefix.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # HEVY API SETTINGS
    # ==========================================================================

    hevy_api_key: str = Field(
        default="",
        description="Hevy API key (required to start the server)",
        validation_alias="HEVY_API_KEY",
    )
    hevy_api_base_url: str = Field(
        default=DEFAULT_HEVY_API_BASE_URL,
        description="Base URL of the Hevy REST API",
        validation_alias="HEVY_API_BASE_URL",
    )
    hevy_request_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for a single Hevy API request",
        validation_alias="HEVY_REQUEST_TIMEOUT",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="LOG_FILE",
    )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
