# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Logging for the Hevy MCP server.

Provides:
- JSON records for log shippers, a compact console format for terminals
- Per-request context (request id and MCP session id) attached to every record
- Security audit events at a dedicated SECURITY level
- Tool call logging with secrets redacted

Every handler writes to stderr: stdout carries the stdio transport.
"""

from __future__ import annotations

import json
import logging
import re
import secrets
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

SECURITY = 35
logging.addLevelName(SECURITY, "SECURITY")

_request_id: ContextVar[str | None] = ContextVar("hevy_request_id", default=None)
_session_id: ContextVar[str | None] = ContextVar("hevy_session_id", default=None)

_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return secrets.token_hex(6)


def current_request_id() -> str | None:
    return _request_id.get()


def current_session_id() -> str | None:
    return _session_id.get()


@contextmanager
def log_context(request_id: str | None = None, session_id: str | None = None) -> Iterator[str]:
    """Bind a request id, and optionally a session id, to records logged inside the block.

    A caller-supplied request id is kept only if it is a short token;
    anything else is replaced by a fresh id. Yields the id in effect.
    """
    if not request_id or not _REQUEST_ID_PATTERN.fullmatch(request_id):
        request_id = new_request_id()
    request_token = _request_id.set(request_id)
    session_token = _session_id.set(session_id) if session_id else None
    try:
        yield request_id
    finally:
        if session_token is not None:
            _session_id.reset(session_token)
        _request_id.reset(request_token)


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = getattr(record, "fields", None)
    return fields if isinstance(fields, dict) else {}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: ``ts``, ``level``, ``logger``, ``msg``, then ``request_id`` and
    ``session_id`` when bound, the record's ``fields``, ``where`` for errors
    and ``exc`` for tracebacks.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in (("request_id", current_request_id()), ("session_id", current_session_id())):
            if value:
                entry[key] = value

        fields = _record_fields(record)
        if fields:
            entry["fields"] = fields
        if record.levelno >= logging.ERROR:
            entry["where"] = f"{record.pathname}:{record.lineno} in {record.funcName}"
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line human format, colored by level on a terminal.

    ``12:00:01 INFO     hevy_mcp.server.app [a1b2c3d4e5f6] message key=value``
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "",
        logging.WARNING: "\033[33m",
        SECURITY: "\033[36m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool | None = None):
        super().__init__("%(asctime)s %(levelname)-8s %(name)s %(message)s", datefmt="%H:%M:%S")
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        request_id = current_request_id()
        if request_id:
            head, sep, message = line.partition(f"{record.name} ")
            line = f"{head}{sep}[{request_id}] {message}"
        pairs = " ".join(f"{k}={v}" for k, v in _record_fields(record).items() if v is not None)
        if pairs:
            line = f"{line} {pairs}"
        color = self.LEVEL_COLORS.get(record.levelno, "") if self.use_colors else ""
        return f"{color}{line}{self.RESET}" if color else line


def configure_logging(
    level: str | int = "INFO",
    log_file: str | None = None,
    log_format: str = "",
) -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Args:
        level: Level name or number; unknown names fall back to INFO.
        log_file: Extra file that always receives JSON records.
        log_format: "json", "text", or "" to pick JSON unless stderr is a terminal.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    fmt = log_format.lower()
    use_json = fmt == "json" or (fmt != "text" and not sys.stderr.isatty())

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if use_json else ConsoleFormatter())
    handlers: list[logging.Handler] = [console]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class SecurityAuditLogger:
    """Audit trail for authentication, session and throttling events.

    Each event is one record whose message is the event name and whose
    ``fields`` hold the event data.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("hevy_mcp.audit")

    def event(self, name: str, level: int = SECURITY, **fields: Any) -> None:
        self.logger.log(level, name, extra={"fields": fields})

    def auth_attempt(self, success: bool, ip: str | None = None, session_id: str | None = None) -> None:
        self.event("auth_attempt", success=success, ip=ip, session_id=session_id)

    def auth_failure(self, reason: str, ip: str | None = None) -> None:
        self.event("auth_failure", reason=reason, ip=ip)

    def session_created(self, session_id: str, ip: str | None = None) -> None:
        self.event("session_created", session_id=session_id, ip=ip)

    def session_expired(self, session_id: str, reason: str) -> None:
        self.event("session_expired", session_id=session_id, reason=reason)

    def rate_limit_exceeded(self, ip: str | None = None, path: str | None = None, policy: str = "general") -> None:
        self.event("rate_limit_exceeded", ip=ip, path=path, policy=policy)

    def api_request(
        self,
        method: str,
        path: str,
        status_code: int | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """A completed HTTP request. Logged at INFO: routine traffic, not a security event."""
        self.event(
            "api_request",
            level=logging.INFO,
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=round(duration_ms, 1) if duration_ms is not None else None,
        )


SENSITIVE_KEY = re.compile(r"pass(word)?|secret|token|api[_-]?key|auth|credential", re.IGNORECASE)
MAX_LOGGED_STRING = 500


def redact(value: Any) -> Any:
    """Copy of ``value`` with secret-looking keys masked and long strings cut."""
    if isinstance(value, dict):
        return {k: "[REDACTED]" if SENSITIVE_KEY.search(str(k)) else redact(v) for k, v in value.items()}
    if isinstance(value, list):
        return [redact(item) for item in value]
    if isinstance(value, str) and len(value) > MAX_LOGGED_STRING:
        return value[:MAX_LOGGED_STRING] + "..."
    return value


class ToolCallLogger:
    """DEBUG records for tool invocations and their outcome."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("hevy_mcp.tools")

    def log_call(self, tool_name: str, arguments: dict[str, Any]) -> None:
        self.logger.debug(
            f"Tool call: {tool_name}",
            extra={"fields": {"tool": tool_name, "arguments": redact(arguments)}},
        )

    def log_result(self, tool_name: str, success: bool, duration_ms: float | None = None) -> None:
        outcome = "success" if success else "failure"
        timing = f" ({duration_ms:.1f}ms)" if duration_ms is not None else ""
        self.logger.debug(
            f"Tool result: {tool_name} -> {outcome}{timing}",
            extra={"fields": {"tool": tool_name, "success": success, "duration_ms": duration_ms}},
        )


audit_logger = SecurityAuditLogger()
tool_logger = ToolCallLogger()
