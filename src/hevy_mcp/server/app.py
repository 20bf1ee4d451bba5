# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Starlette ASGI application for the Hevy MCP HTTP transport.

Endpoints:
    GET  /            server info
    GET  /health      liveness, never gated
    GET  <sse_path>   opens a session event stream
    POST <sse_path>   delivers one JSON-RPC message to a session's engine

Registries and the protocol engine are created per app and kept on
``app.state`` so that tests can inject isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from mcp import types
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from hevy_mcp.core.config import SERVER_NAME
from hevy_mcp.hevy.client import HevyClient
from hevy_mcp.mcp import HEVY_TOOLS, create_server

from .config import ServerSettings, get_package_version, get_settings
from .connections import ConnectionRegistry, StreamConnection
from .engine import McpEngine, ProtocolEngine
from .errors import EXCEPTION_HANDLERS, bad_request_error, invalid_json_error, not_found_error
from .middleware import (
    SESSION_HEADER,
    BearerAuthMiddleware,
    BodySizeLimitMiddleware,
    InternalErrorMiddleware,
    PreflightCORSMiddleware,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    SessionActivityMiddleware,
    client_address,
)
from .rate_limit import FixedWindowRateLimiter
from .sessions import SessionRegistry, SessionSweeper
from .stream import SessionStreamResponse

logger = logging.getLogger(__name__)


# =============================================================================
# ENDPOINTS
# =============================================================================


async def health_endpoint(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(
        {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "transport": "sse",
        }
    )


async def info_endpoint(request: Request) -> JSONResponse:
    """Server info endpoint."""
    settings: ServerSettings = request.app.state.settings

    return JSONResponse(
        {
            "server": SERVER_NAME,
            "version": get_package_version(),
            "protocol": "mcp",
            "transport": "sse",
            "tools": len(HEVY_TOOLS),
            "endpoints": {
                "info": "/",
                "health": settings.health_path,
                "stream": settings.sse_path,
                "messages": settings.sse_path,
            },
            "authentication": {"enabled": settings.auth_enabled, "methods": ["bearer"] if settings.auth_enabled else []},
        }
    )


async def stream_endpoint(request: Request) -> Response:
    """Open an event stream for a new or resumed session.

    A live ``Mcp-Session-Id`` is resumed; any other id is registered as
    given, and no id gets a freshly generated one. The first event names
    the URI to POST messages to.
    """
    state = request.app.state
    settings: ServerSettings = state.settings

    requested = request.headers.get(SESSION_HEADER) or None
    origin = client_address(request.scope, settings.trust_proxy)
    session = state.sessions.get_or_create(requested, origin=origin)

    connection = StreamConnection(session.id)
    logger.debug(f"Opening stream {connection.connection_id[:8]} for session {session.id}")

    return SessionStreamResponse(
        connection,
        engine=state.engine,
        connections=state.connections,
        sessions=state.sessions,
        endpoint_url=f"{settings.sse_path}?sessionId={session.id}",
        heartbeat_interval=settings.heartbeat_seconds,
    )


def _requested_session_id(request: Request) -> str | None:
    return (
        request.headers.get(SESSION_HEADER)
        or request.query_params.get("sessionId")
        or request.query_params.get("session_id")
    )


async def message_endpoint(request: Request) -> Response:
    """Deliver one JSON-RPC message to the engine bound to a session.

    Requests wait for their response (200). Notifications, responses and
    requests outliving ``message_timeout`` are acknowledged with 202.
    """
    state = request.app.state
    settings: ServerSettings = state.settings

    session_id = _requested_session_id(request)
    if not session_id:
        return bad_request_error("Missing session ID")

    connection: StreamConnection | None = state.connections.get(session_id)
    if connection is None:
        return not_found_error()

    body = await request.body()
    try:
        message = types.JSONRPCMessage.model_validate_json(body)
    except ValidationError:
        return invalid_json_error()

    state.sessions.touch(session_id)

    # SessionNotFoundError propagates to the exception handler as a 404
    reply = await connection.deliver(message, wait_timeout=settings.message_timeout)
    if reply is None:
        return JSONResponse({"status": "accepted"}, status_code=202)
    return JSONResponse(reply.model_dump(by_alias=True, exclude_none=True, mode="json"))


# =============================================================================
# APPLICATION
# =============================================================================


@asynccontextmanager
async def lifespan(app: Starlette):
    """Application lifespan handler."""
    settings: ServerSettings = app.state.settings
    logger.info(f"Starting Hevy MCP server on {settings.base_url}{settings.sse_path}")

    if settings.is_production and not settings.enable_https:
        logger.warning("Running in production without HTTPS. Set ENABLE_HTTPS or terminate TLS at a proxy.")
    if not settings.auth_enabled:
        logger.warning("AUTH_TOKEN is not set; HTTP endpoints accept unauthenticated requests")

    sweeper = SessionSweeper(
        app.state.sessions,
        settings.session_sweep_interval,
        on_sweep=(app.state.rate_limiter.prune, app.state.auth_limiter.prune),
    )
    app.state.sweeper = sweeper
    sweeper.start()

    try:
        yield
    finally:
        await sweeper.stop()
        client: HevyClient | None = getattr(app.state, "hevy_client", None)
        if client is not None:
            await client.aclose()
        logger.info("Hevy MCP server shutting down")


def create_app(
    settings: ServerSettings | None = None,
    engine: ProtocolEngine | None = None,
    sessions: SessionRegistry | None = None,
    connections: ConnectionRegistry | None = None,
) -> Starlette:
    """Create the Starlette ASGI application.

    Without an explicit ``engine`` the app builds its own HevyClient and MCP
    server from ``settings`` and closes the client on shutdown.
    """
    if settings is None:
        settings = get_settings()

    hevy_client: HevyClient | None = None
    if engine is None:
        hevy_client = HevyClient(
            api_key=settings.hevy_api_key,
            base_url=settings.hevy_api_base_url,
            timeout=settings.hevy_request_timeout,
        )
        engine = McpEngine(create_server(hevy_client))

    if sessions is None:
        sessions = SessionRegistry(settings.session_timeout_seconds)
    if connections is None:
        connections = ConnectionRegistry()

    rate_limiter = FixedWindowRateLimiter(settings.rate_limit_max, settings.rate_limit_window)
    auth_limiter = FixedWindowRateLimiter(settings.auth_rate_limit_max, settings.rate_limit_window)
    exempt_paths = (settings.health_path,)

    routes = [
        Route("/", info_endpoint, methods=["GET"]),
        Route(settings.health_path, health_endpoint, methods=["GET"]),
        Route(settings.sse_path, stream_endpoint, methods=["GET"]),
        Route(settings.sse_path, message_endpoint, methods=["POST"]),
    ]

    # Outermost first
    middleware = [
        Middleware(RequestLoggingMiddleware),
        Middleware(SecurityHeadersMiddleware),
        Middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes),
        Middleware(
            PreflightCORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "Mcp-Session-Id"],
            expose_headers=["Mcp-Session-Id"],
        ),
        Middleware(
            RateLimitMiddleware,
            limiter=rate_limiter,
            exempt_paths=exempt_paths,
            trust_proxy=settings.trust_proxy,
        ),
    ]
    if settings.auth_token:
        middleware.append(
            Middleware(
                BearerAuthMiddleware,
                token=settings.auth_token,
                limiter=auth_limiter,
                exempt_paths=exempt_paths,
                trust_proxy=settings.trust_proxy,
            )
        )
    middleware.append(Middleware(SessionActivityMiddleware, sessions=sessions, exempt_paths=exempt_paths))
    middleware.append(Middleware(InternalErrorMiddleware, production=settings.is_production))

    app = Starlette(
        routes=routes,
        middleware=middleware,
        exception_handlers=dict(EXCEPTION_HANDLERS),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessions = sessions
    app.state.connections = connections
    app.state.rate_limiter = rate_limiter
    app.state.auth_limiter = auth_limiter
    app.state.hevy_client = hevy_client
    return app


def _uvicorn_options(settings: ServerSettings) -> dict[str, Any]:
    options: dict[str, Any] = {
        "host": settings.host,
        "port": settings.port,
        "log_config": None,
        "access_log": False,
    }
    if settings.enable_https:
        options["ssl_keyfile"] = settings.https_key_path
        options["ssl_certfile"] = settings.https_cert_path
    return options


async def serve(settings: ServerSettings, engine: ProtocolEngine | None = None) -> None:
    """Serve the HTTP transport on the running event loop."""
    import uvicorn

    config = uvicorn.Config(create_app(settings, engine=engine), **_uvicorn_options(settings))
    await uvicorn.Server(config).serve()


def run(settings: ServerSettings | None = None) -> None:
    """Run the HTTP transport using uvicorn."""
    import uvicorn

    if settings is None:
        settings = get_settings()

    logger.info(f"Starting Hevy MCP HTTP server on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), **_uvicorn_options(settings))
