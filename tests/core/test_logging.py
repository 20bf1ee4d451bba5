"""Tests for hevy_mcp.core.logging module."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from hevy_mcp.core.logging import (
    SECURITY,
    ConsoleFormatter,
    JSONFormatter,
    SecurityAuditLogger,
    ToolCallLogger,
    configure_logging,
    current_request_id,
    current_session_id,
    log_context,
    new_request_id,
    redact,
)


def make_record(msg: str = "hello", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("test.logger", level, "/src/mod.py", 42, msg, None, None, func="fn")
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, (JSONFormatter, ConsoleFormatter)):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


# ============================================================================
# Request Context Tests
# ============================================================================


class TestLogContext:
    def test_nothing_bound_by_default(self):
        assert current_request_id() is None
        assert current_session_id() is None

    def test_new_request_id(self):
        first = new_request_id()
        assert len(first) == 12
        assert first != new_request_id()

    def test_binds_and_resets(self):
        with log_context(session_id="sess_1") as request_id:
            assert len(request_id) == 12
            assert current_request_id() == request_id
            assert current_session_id() == "sess_1"
        assert current_request_id() is None
        assert current_session_id() is None

    def test_keeps_client_request_id(self):
        with log_context("req-42.a_b") as request_id:
            assert request_id == "req-42.a_b"

    @pytest.mark.parametrize("supplied", ["", "has space", "x" * 65, "bad\nid"])
    def test_replaces_unusable_request_id(self, supplied):
        with log_context(supplied) as request_id:
            assert request_id != supplied
            assert len(request_id) == 12

    def test_nested_session_kept_when_not_given(self):
        with log_context(session_id="outer"):
            with log_context():
                assert current_session_id() == "outer"


# ============================================================================
# Formatter Tests
# ============================================================================


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["msg"] == "hello"
        assert "ts" in data
        assert "where" not in data
        assert "request_id" not in data

    def test_error_includes_location(self):
        data = json.loads(JSONFormatter().format(make_record(level=logging.ERROR)))
        assert data["where"] == "/src/mod.py:42 in fn"

    def test_context_and_fields(self):
        with log_context("req-1", session_id="sess_1"):
            data = json.loads(JSONFormatter().format(make_record(fields={"tool": "get-workouts"})))
        assert data["request_id"] == "req-1"
        assert data["session_id"] == "sess_1"
        assert data["fields"] == {"tool": "get-workouts"}

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in data["exc"]


class TestConsoleFormatter:
    def test_plain_output(self):
        output = ConsoleFormatter(use_colors=False).format(make_record())
        assert output.endswith("INFO     test.logger hello")

    def test_request_id_and_fields(self):
        formatter = ConsoleFormatter(use_colors=False)
        record = make_record(fields={"method": "GET", "status_code": None})
        with log_context("req-1"):
            output = formatter.format(record)
        assert output.endswith("test.logger [req-1] hello method=GET")

    def test_colors_wrap_line(self):
        output = ConsoleFormatter(use_colors=True).format(make_record(level=logging.WARNING))
        assert output.startswith("\033[33m")
        assert output.endswith(ConsoleFormatter.RESET)

    def test_record_untouched(self):
        record = make_record(fields={"a": 1})
        ConsoleFormatter(use_colors=False).format(record)
        assert record.msg == "hello"

    def test_security_level_name(self):
        assert logging.getLevelName(SECURITY) == "SECURITY"


# ============================================================================
# configure_logging Tests
# ============================================================================


class TestConfigureLogging:
    def test_json_format(self, restore_root_logger):
        configure_logging("DEBUG", log_format="json")
        assert restore_root_logger.level == logging.DEBUG
        (handler,) = restore_root_logger.handlers
        assert isinstance(handler.formatter, JSONFormatter)
        assert handler.stream is sys.stderr

    def test_text_format(self, restore_root_logger):
        configure_logging("warning", log_format="text")
        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging("LOUD", log_format="json")
        assert restore_root_logger.level == logging.INFO

    def test_log_file_is_json(self, restore_root_logger, tmp_path):
        configure_logging("INFO", log_file=str(tmp_path / "server.log"), log_format="text")
        file_handlers = [h for h in restore_root_logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert isinstance(file_handlers[0].formatter, JSONFormatter)

    def test_quiets_httpx(self, restore_root_logger):
        configure_logging("DEBUG", log_format="json")
        assert logging.getLogger("httpx").level == logging.WARNING


# ============================================================================
# Audit and Tool Loggers
# ============================================================================


class TestSecurityAuditLogger:
    def test_auth_failure_logged_at_security_level(self, caplog):
        audit = SecurityAuditLogger(logging.getLogger("test.audit"))
        with caplog.at_level(SECURITY, logger="test.audit"):
            audit.auth_failure("invalid_token", ip="10.0.0.1")
        (record,) = caplog.records
        assert record.levelno == SECURITY
        assert record.getMessage() == "auth_failure"
        assert record.fields == {"reason": "invalid_token", "ip": "10.0.0.1"}

    def test_rate_limit_event(self, caplog):
        audit = SecurityAuditLogger(logging.getLogger("test.audit"))
        with caplog.at_level(SECURITY, logger="test.audit"):
            audit.rate_limit_exceeded(ip="1.2.3.4", path="/mcp", policy="auth")
        assert caplog.records[0].fields["policy"] == "auth"

    def test_api_request_is_info(self, caplog):
        audit = SecurityAuditLogger(logging.getLogger("test.audit"))
        with caplog.at_level(logging.INFO, logger="test.audit"):
            audit.api_request("GET", "/health", status_code=200, duration_ms=1.234)
        (record,) = caplog.records
        assert record.levelno == logging.INFO
        assert record.fields["duration_ms"] == 1.2


class TestToolCallLogger:
    def test_redacts_sensitive_arguments(self, caplog):
        tool_logger = ToolCallLogger(logging.getLogger("test.tools"))
        with caplog.at_level(logging.DEBUG, logger="test.tools"):
            tool_logger.log_call("create-webhook-subscription", {"url": "https://x", "authToken": "s3cret"})
        assert caplog.records[0].fields["arguments"] == {"url": "https://x", "authToken": "[REDACTED]"}

    def test_redact_nested_and_long_strings(self):
        redacted = redact({"sets": [{"api_key": "x", "reps": 5}], "notes": "n" * 600})
        assert redacted["sets"] == [{"api_key": "[REDACTED]", "reps": 5}]
        assert len(redacted["notes"]) == 503

    def test_log_result_message(self, caplog):
        tool_logger = ToolCallLogger(logging.getLogger("test.tools"))
        with caplog.at_level(logging.DEBUG, logger="test.tools"):
            tool_logger.log_result("get-workouts", False, duration_ms=12.34)
        assert caplog.records[0].getMessage() == "Tool result: get-workouts -> failure (12.3ms)"
