# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Request gate for the HTTP transport.

Pure ASGI middleware, so long-lived event streams pass through without
being buffered. Installed outermost first:

    RequestLoggingMiddleware
    SecurityHeadersMiddleware
    BodySizeLimitMiddleware
    PreflightCORSMiddleware
    RateLimitMiddleware
    BearerAuthMiddleware        (only when a token is configured)
    SessionActivityMiddleware
    InternalErrorMiddleware

A stage that rejects a request answers it directly; later stages and the
protocol engine never see it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Collection

from starlette.datastructures import Headers, MutableHeaders
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from hevy_mcp.core.logging import audit_logger, log_context

from .errors import (
    internal_error,
    payload_too_large_error,
    rate_limited_error,
    session_expired_error,
    unauthorized_error,
)
from .rate_limit import FixedWindowRateLimiter
from .security import extract_bearer_token, sanitize_error_message, secure_compare
from .sessions import SessionRegistry, SessionState

logger = logging.getLogger(__name__)

SESSION_HEADER = "mcp-session-id"
REQUEST_ID_HEADER = "x-request-id"

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self'; style-src 'self'; img-src 'self' data:; "
        "connect-src 'self'; frame-ancestors 'none'; base-uri 'self'; form-action 'self'"
    ),
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
}


def client_address(scope: Scope, trust_proxy: bool = False) -> str:
    """Address used to key rate limits and audit events.

    The ASGI peer address, or the first X-Forwarded-For hop when the server
    sits behind a trusted proxy.
    """
    if trust_proxy:
        forwarded = Headers(scope=scope).get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    client = scope.get("client")
    if client:
        return client[0]
    return "unknown"


class RequestLoggingMiddleware:
    """Log method, path, status and duration of every request.

    Records logged while the request runs carry its request id (taken from
    X-Request-ID when the client sends a usable one) and its MCP session id.
    The request id is echoed in the X-Request-ID response header.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        status_code: int | None = None
        start = time.perf_counter()

        with log_context(headers.get(REQUEST_ID_HEADER), session_id=headers.get(SESSION_HEADER)) as request_id:

            async def send_wrapper(message: Message) -> None:
                nonlocal status_code
                if message["type"] == "http.response.start":
                    status_code = message["status"]
                    MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
                await send(message)

            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                audit_logger.api_request(
                    scope["method"],
                    scope["path"],
                    status_code=status_code,
                    duration_ms=(time.perf_counter() - start) * 1000,
                )


class SecurityHeadersMiddleware:
    """Add a fixed set of security headers to every HTTP response."""

    def __init__(self, app: ASGIApp, headers: dict[str, str] | None = None) -> None:
        self.app = app
        self.headers = dict(SECURITY_HEADERS if headers is None else headers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self.headers.items():
                    headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)


class _BodyTooLarge(Exception):
    pass


class BodySizeLimitMiddleware:
    """Reject bodies larger than ``max_body_bytes`` with 413 before parsing.

    Checks the declared Content-Length first, then counts streamed chunks
    for bodies that do not declare one.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                declared = 0
            if declared > self.max_body_bytes:
                response = payload_too_large_error(self.max_body_bytes)
                await response(scope, receive, send)
                return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise _BodyTooLarge()
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except _BodyTooLarge:
            if response_started:
                raise
            response = payload_too_large_error(self.max_body_bytes)
            await response(scope, receive, send)


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware that answers every OPTIONS request itself.

    Proper preflights (Origin plus Access-Control-Request-Method) go through
    the usual checks; any other OPTIONS request gets the allow-list headers
    and a 200 without reaching the application.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "OPTIONS":
            await super().__call__(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if "origin" in headers and "access-control-request-method" in headers:
            response = self.preflight_response(request_headers=headers)
        else:
            response = PlainTextResponse("OK", status_code=200, headers=dict(self.preflight_headers))
        await response(scope, receive, send)


class RateLimitMiddleware:
    """General fixed-window rate limit per client address."""

    def __init__(
        self,
        app: ASGIApp,
        limiter: FixedWindowRateLimiter,
        exempt_paths: Collection[str] = ("/health",),
        trust_proxy: bool = False,
    ) -> None:
        self.app = app
        self.limiter = limiter
        self.exempt_paths = frozenset(exempt_paths)
        self.trust_proxy = trust_proxy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return

        ip = client_address(scope, self.trust_proxy)
        result = self.limiter.hit(ip)
        if not result.allowed:
            audit_logger.rate_limit_exceeded(ip=ip, path=scope["path"], policy="general")
            response = rate_limited_error(
                headers=result.headers(),
                message="Too many requests from this IP, please try again later",
            )
            await response(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).update(result.headers())
            await send(message)

        await self.app(scope, receive, send_with_headers)


class BearerAuthMiddleware:
    """Require ``Authorization: Bearer <token>`` on every non-exempt request.

    Attempts are counted against a separate limiter and refunded on
    success, so only failures use up the budget.
    """

    def __init__(
        self,
        app: ASGIApp,
        token: str,
        limiter: FixedWindowRateLimiter,
        exempt_paths: Collection[str] = ("/health",),
        trust_proxy: bool = False,
    ) -> None:
        self.app = app
        self.token = token
        self.limiter = limiter
        self.exempt_paths = frozenset(exempt_paths)
        self.trust_proxy = trust_proxy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return

        ip = client_address(scope, self.trust_proxy)
        result = self.limiter.hit(ip)
        if not result.allowed:
            audit_logger.rate_limit_exceeded(ip=ip, path=scope["path"], policy="auth")
            response = rate_limited_error(
                headers=result.headers(),
                message="Too many authentication attempts, please try again later",
            )
            await response(scope, receive, send)
            return

        headers = Headers(scope=scope)
        candidate = extract_bearer_token(headers.get("authorization"))
        if not secure_compare(candidate, self.token):
            reason = "missing token" if candidate is None else "invalid token"
            audit_logger.auth_failure(reason, ip=ip)
            response = unauthorized_error()
            await response(scope, receive, send)
            return

        self.limiter.refund(ip)
        audit_logger.auth_attempt(True, ip=ip, session_id=headers.get(SESSION_HEADER))
        await self.app(scope, receive, send)


class SessionActivityMiddleware:
    """Reject expired sessions and bump activity on live ones.

    Only applies when the request carries an Mcp-Session-Id header. Unknown
    ids pass through: the stream endpoint may create them and the message
    endpoint answers 404.
    """

    def __init__(self, app: ASGIApp, sessions: SessionRegistry, exempt_paths: Collection[str] = ("/health",)) -> None:
        self.app = app
        self.sessions = sessions
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return

        session_id = Headers(scope=scope).get(SESSION_HEADER)
        if session_id:
            state = self.sessions.validate(session_id)
            if state is SessionState.EXPIRED:
                response = session_expired_error()
                await response(scope, receive, send)
                return
            if state is SessionState.LIVE:
                self.sessions.touch(session_id)

        await self.app(scope, receive, send)


class InternalErrorMiddleware:
    """Answer unexpected exceptions with a 500 from inside the gate.

    Installed innermost, so the 500 still passes back through the security
    headers, CORS and request logging stages and carries the request id of
    the failed request. Exceptions raised after the response has started
    propagate unchanged.
    """

    def __init__(self, app: ASGIApp, production: bool = False) -> None:
        self.app = app
        self.production = production

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except _BodyTooLarge:
            raise
        except Exception as e:
            if response_started:
                raise
            response = internal_error(sanitize_error_message(e, self.production), exc=e)
            await response(scope, receive, send)
