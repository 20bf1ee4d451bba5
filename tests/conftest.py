"""Global test fixtures for the Hevy MCP test suite."""

from __future__ import annotations

import pytest

# Settings read from the environment; cleared so the host cannot leak into tests.
_SETTINGS_ENV = (
    "HEVY_API_KEY",
    "HEVY_API_BASE_URL",
    "HEVY_REQUEST_TIMEOUT",
    "TRANSPORT",
    "HOST",
    "PORT",
    "SSE_PATH",
    "HEARTBEAT_INTERVAL",
    "SESSION_TIMEOUT",
    "SESSION_SWEEP_INTERVAL",
    "MESSAGE_TIMEOUT",
    "AUTH_TOKEN",
    "PRODUCTION",
    "ENVIRONMENT",
    "NODE_ENV",
    "MAX_BODY_BYTES",
    "RATE_LIMIT_MAX",
    "AUTH_RATE_LIMIT_MAX",
    "RATE_LIMIT_WINDOW",
    "ALLOWED_ORIGINS",
    "TRUST_PROXY",
    "ENABLE_HTTPS",
    "HTTPS_KEY_PATH",
    "HTTPS_CERT_PATH",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove server settings from the environment for every test."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def clean_settings_caches():
    """Reset lazily created settings between tests."""
    import hevy_mcp.core.config as core_config
    import hevy_mcp.server.config as server_config

    core_config._config = None
    server_config._settings = None
    yield
    core_config._config = None
    server_config._settings = None
