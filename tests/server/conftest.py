"""Server-specific test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import asynccontextmanager

import httpx
import pytest
from starlette.applications import Starlette
from starlette.testclient import TestClient

from hevy_mcp.server.app import create_app
from hevy_mcp.server.config import ServerSettings
from hevy_mcp.server.connections import ConnectionRegistry
from hevy_mcp.server.sessions import SessionRegistry

from .helpers import EchoEngine, make_settings


@pytest.fixture
def settings_factory() -> Callable[..., ServerSettings]:
    return make_settings


@pytest.fixture
def settings() -> ServerSettings:
    return make_settings()


@pytest.fixture
def engine() -> EchoEngine:
    return EchoEngine()


@pytest.fixture
def sessions(settings: ServerSettings) -> SessionRegistry:
    return SessionRegistry(settings.session_timeout_seconds)


@pytest.fixture
def connections() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def app(settings, engine, sessions, connections) -> Starlette:
    return create_app(settings, engine=engine, sessions=sessions, connections=connections)


@pytest.fixture
def client(app) -> TestClient:
    """Synchronous client for requests that do not need an open stream."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def http_factory():
    """Build an async client for an app, sharing the test's event loop."""

    @asynccontextmanager
    async def factory(app: Starlette):
        transport = httpx.ASGITransport(app=app, client=("127.0.0.1", 50000))
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
            yield c

    return factory


@pytest.fixture
async def http(app, http_factory):
    async with http_factory(app) as c:
        yield c
