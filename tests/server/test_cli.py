"""Tests for the hevy-mcp-server entry point."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from hevy_mcp.server import cli
from hevy_mcp.server.engine import McpEngine

from .helpers import make_settings


@pytest.fixture
def quiet_logging(monkeypatch):
    configure = MagicMock()
    monkeypatch.setattr(cli, "configure_logging", configure)
    return configure


class TestArguments:
    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("HEVY_API_KEY", "k")
        monkeypatch.setenv("TRANSPORT", "stdio")
        args = cli.build_parser().parse_args(["--transport", "sse", "--port", "4001"])
        settings = cli.settings_from_args(args)
        assert settings.transport == "sse"
        assert settings.port == 4001

    def test_environment_used_without_flags(self, monkeypatch):
        monkeypatch.setenv("HEVY_API_KEY", "k")
        monkeypatch.setenv("TRANSPORT", "both")
        settings = cli.settings_from_args(cli.build_parser().parse_args([]))
        assert settings.transport == "both"

    def test_rejects_unknown_transport(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--transport", "websocket"])


class TestMain:
    def test_missing_api_key_exits_1(self, quiet_logging, monkeypatch):
        run = MagicMock()
        monkeypatch.setattr(cli.anyio, "run", run)
        assert cli.main([]) == 1
        run.assert_not_called()

    def test_runs_transports(self, quiet_logging, monkeypatch):
        monkeypatch.setenv("HEVY_API_KEY", "k")
        run = MagicMock()
        monkeypatch.setattr(cli.anyio, "run", run)

        assert cli.main(["--transport", "sse", "--log-level", "DEBUG"]) == 0

        func, settings = run.call_args.args
        assert func is cli.serve_transports
        assert settings.transport == "sse"
        quiet_logging.assert_called_once_with("DEBUG", log_file=None, log_format="")

    def test_keyboard_interrupt_is_clean_exit(self, quiet_logging, monkeypatch):
        monkeypatch.setenv("HEVY_API_KEY", "k")
        monkeypatch.setattr(cli.anyio, "run", MagicMock(side_effect=KeyboardInterrupt))
        assert cli.main([]) == 0


class TestServeTransports:
    @pytest.fixture
    def transports(self, monkeypatch):
        stdio = AsyncMock()
        http = AsyncMock()
        monkeypatch.setattr(cli, "run_stdio", stdio)
        monkeypatch.setattr(cli, "serve", http)
        return stdio, http

    async def test_stdio(self, transports):
        stdio, http = transports
        await cli.serve_transports(make_settings(transport="stdio"))
        stdio.assert_awaited_once()
        assert isinstance(stdio.call_args.args[0], McpEngine)
        http.assert_not_awaited()

    async def test_sse(self, transports):
        stdio, http = transports
        settings = make_settings(transport="sse")
        await cli.serve_transports(settings)
        http.assert_awaited_once()
        assert http.call_args.args[0] is settings
        stdio.assert_not_awaited()

    async def test_both_share_one_engine(self, transports):
        stdio, http = transports
        await cli.serve_transports(make_settings(transport="both"))
        http.assert_awaited_once()
        stdio.assert_called_once()
        assert stdio.call_args.args[0] is http.call_args.args[1]
