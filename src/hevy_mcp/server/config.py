# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Server configuration using pydantic-settings."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, model_validator

from hevy_mcp.core.config import CoreSettings
from hevy_mcp.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_package_version() -> str:
    """Get the package version from installed metadata.

    Returns the version from pyproject.toml when installed,
    or a dev fallback when running from source without install.
    """
    try:
        return version("hevy-mcp")
    except PackageNotFoundError:
        return "0.0.0-dev"


class ServerSettings(CoreSettings):
    """Configuration for the Hevy MCP server process.

    Inherits the core settings (Hevy API access, logging) and adds the
    transport, session and gate settings.
    """

    transport: Literal["stdio", "sse", "both"] = Field(
        default="stdio",
        description="Transport mode: stdio, sse, or both",
        validation_alias="TRANSPORT",
    )

    # HTTP listener
    host: str = Field(default="127.0.0.1", description="Host to bind to", validation_alias="HOST")
    port: int = Field(default=3000, ge=1, le=65535, description="Port to bind to", validation_alias="PORT")
    sse_path: str = Field(default="/mcp", description="Path of the streaming endpoint", validation_alias="SSE_PATH")
    health_path: str = Field(default="/health", description="Path of the health endpoint")

    # Sessions
    heartbeat_interval: int = Field(
        default=30000,
        gt=0,
        description="Heartbeat interval in milliseconds",
        validation_alias="HEARTBEAT_INTERVAL",
    )
    session_timeout: int = Field(
        default=30 * 24 * 60 * 60 * 1000,
        gt=0,
        description="Inactivity timeout in milliseconds (default: 30 days)",
        validation_alias="SESSION_TIMEOUT",
    )
    session_sweep_interval: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds between expired-session sweeps (default: 1 hour)",
        validation_alias="SESSION_SWEEP_INTERVAL",
    )
    message_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Seconds a POSTed request waits for its response before falling back to 202",
        validation_alias="MESSAGE_TIMEOUT",
    )

    # Authentication
    auth_token: str | None = Field(
        default=None,
        description="Bearer token required on every request (auth disabled when unset)",
        validation_alias="AUTH_TOKEN",
    )

    # Environment
    production: bool = Field(default=False, description="Production mode", validation_alias="PRODUCTION")
    environment: str = Field(
        default="development",
        description="Deployment environment name",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )

    # Gate
    max_body_bytes: int = Field(
        default=1024 * 1024,
        gt=0,
        description="Maximum request body size in bytes",
        validation_alias="MAX_BODY_BYTES",
    )
    rate_limit_max: int = Field(
        default=1000,
        gt=0,
        description="Requests allowed per client and window",
        validation_alias="RATE_LIMIT_MAX",
    )
    auth_rate_limit_max: int = Field(
        default=50,
        gt=0,
        description="Failed authentication attempts allowed per client and window",
        validation_alias="AUTH_RATE_LIMIT_MAX",
    )
    rate_limit_window: int = Field(
        default=900,
        gt=0,
        description="Rate limit window in seconds (default: 15 minutes)",
        validation_alias="RATE_LIMIT_WINDOW",
    )
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="CORS allowed origins",
        validation_alias="ALLOWED_ORIGINS",
    )
    trust_proxy: bool = Field(
        default=False,
        description="Use the first X-Forwarded-For hop as the client address",
        validation_alias="TRUST_PROXY",
    )

    # TLS
    enable_https: bool = Field(default=False, description="Serve over HTTPS", validation_alias="ENABLE_HTTPS")
    https_key_path: str | None = Field(default=None, description="TLS private key path", validation_alias="HTTPS_KEY_PATH")
    https_cert_path: str | None = Field(
        default=None,
        description="TLS certificate path",
        validation_alias="HTTPS_CERT_PATH",
    )

    @model_validator(mode="after")
    def validate_server_settings(self) -> ServerSettings:
        """Cross-field checks that a single field validator cannot express."""
        if not self.sse_path.startswith("/"):
            raise ValueError("SSE_PATH must start with '/'")
        if self.sse_path == self.health_path:
            raise ValueError(f"SSE_PATH cannot be {self.health_path}")
        if self.enable_https and not (self.https_key_path and self.https_cert_path):
            raise ValueError("HTTPS_KEY_PATH and HTTPS_CERT_PATH are required when ENABLE_HTTPS is set")
        if self.session_timeout <= self.heartbeat_interval:
            raise ValueError("SESSION_TIMEOUT must be longer than HEARTBEAT_INTERVAL")
        if self.auth_token is not None and not self.auth_token.strip():
            object.__setattr__(self, "auth_token", None)
        return self

    @property
    def is_production(self) -> bool:
        """True when PRODUCTION is set or NODE_ENV/ENVIRONMENT is 'production'."""
        return self.production or self.environment.lower() == "production"

    @property
    def auth_enabled(self) -> bool:
        return self.auth_token is not None

    @property
    def heartbeat_seconds(self) -> float:
        return self.heartbeat_interval / 1000

    @property
    def session_timeout_seconds(self) -> float:
        return self.session_timeout / 1000

    @property
    def base_url(self) -> str:
        """Get the base URL for the server."""
        scheme = "https" if self.enable_https else "http"
        return f"{scheme}://{self.host}:{self.port}"


def load_settings(**overrides) -> ServerSettings:
    """Build settings from the environment, failing with ConfigurationError.

    The Hevy API key is mandatory for every transport.
    """
    try:
        settings = ServerSettings(**overrides)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise ConfigurationError(f"Invalid configuration: {e}", missing_vars=fields) from e

    if not settings.hevy_api_key:
        raise ConfigurationError("HEVY_API_KEY environment variable is required", missing_vars=["HEVY_API_KEY"])
    return settings


# Global settings instance - lazy loaded
_settings: ServerSettings | None = None


def get_settings() -> ServerSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    global _settings
    _settings = None
