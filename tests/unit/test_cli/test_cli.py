"""Tests for the command-line interface."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from posturemax.bus.messages import Ack
from posturemax.cli import main, parse_args
from posturemax.endpoint.client import CommandClient, CommandClientError


class TestParseArgs:
    def test_run(self) -> None:
        args = parse_args(["run", "--no-endpoint", "--start"])
        assert args.command == "run"
        assert args.no_endpoint is True
        assert args.start is True

    def test_send_with_level(self) -> None:
        args = parse_args(["-v", "send", "set-transparency", "--level", "transparent"])
        assert args.verbose is True
        assert args.name == "set-transparency"
        assert args.level == "transparent"

    def test_invalid_level(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["send", "set-transparency", "--level", "opaque"])


class TestMain:
    """Test the client subcommands against a patched CommandClient."""

    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 0

    def test_send_ok(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.object(CommandClient, "connect", AsyncMock()), \
                patch.object(CommandClient, "send", AsyncMock(return_value=Ack())) as send:
            with pytest.raises(SystemExit) as excinfo:
                main(["send", "set-transparency", "--level", "visible"])
        assert excinfo.value.code == 0
        send.assert_awaited_once_with("set-transparency", level="visible")
        assert "ok" in capsys.readouterr().out

    def test_send_rejected(self) -> None:
        ack = Ack(success=False, error="no such surface")
        with patch.object(CommandClient, "connect", AsyncMock()), \
                patch.object(CommandClient, "send", AsyncMock(return_value=ack)):
            with pytest.raises(SystemExit) as excinfo:
                main(["send", "toggle-camera"])
        assert excinfo.value.code == 1

    def test_endpoint_unreachable(self) -> None:
        failing = AsyncMock(side_effect=CommandClientError("connection refused", path="/health"))
        with patch.object(CommandClient, "connect", failing):
            with pytest.raises(SystemExit) as excinfo:
                main(["status"])
        assert excinfo.value.code == 2

    def test_status(self, capsys: pytest.CaptureFixture[str]) -> None:
        state = {
            "state": "running",
            "started_at": "2025-01-01T12:00:00",
            "samples": [{"is_good": True}],
            "surfaces": {"overlay": {"lifecycle": "visible", "opacity": "transparent"}},
        }
        with patch.object(CommandClient, "connect", AsyncMock()), \
                patch.object(CommandClient, "get_state", AsyncMock(return_value=state)), \
                patch.object(CommandClient, "get_report", AsyncMock(return_value=None)):
            with pytest.raises(SystemExit) as excinfo:
                main(["status"])
        assert excinfo.value.code == 0
        out = capsys.readouterr().out
        assert "Session:  running" in out
        assert "Overlay   visible (transparent)" in out
