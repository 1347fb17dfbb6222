"""
Tests for the command line entry point.
"""

import json

import pytest

from uatestserver import cli
from uatestserver.cli import HELP, atoi, main, parse_args


class TestAtoi:
    """Test lenient integer parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("1000", 1000),
        ("  42", 42),
        ("-7", -7),
        ("12abc", 12),
        ("abc", 0),
        ("", 0),
    ])
    def test_values(self, text, expected):
        assert atoi(text) == expected


class TestParseArgs:
    """Test option parsing."""

    def test_defaults_are_unset(self):
        args = parse_args([])

        assert args.count is None
        assert args.cycle_ms is None
        assert args.verbose is None
        assert args.export is False
        assert args.help is False

    def test_all_options(self):
        args = parse_args(["-n", "5", "-t", "250", "-v", "2", "-e"])

        assert args.count == 5
        assert args.cycle_ms == 250
        assert args.verbose == 2
        assert args.export is True

    def test_attached_values(self):
        args = parse_args(["-n10", "-t100"])

        assert args.count == 10
        assert args.cycle_ms == 100

    def test_unknown_options_ignored(self):
        """Test that unrecognized options are silently dropped."""
        args = parse_args(["-x", "-n", "3", "--bogus", "value"])

        assert args.count == 3

    def test_non_numeric_value(self):
        assert parse_args(["-n", "many"]).count == 0


class TestMain:
    """Test the process entry point without opening an endpoint."""

    def test_help(self, capsys, monkeypatch):
        async def fail(manager):
            raise AssertionError("server must not start")
        monkeypatch.setattr(cli, "_serve", fail)

        assert main(["-h"]) == 0
        assert capsys.readouterr().out == HELP

    def test_startup_summary_and_error_exit_zero(self, capsys, monkeypatch):
        """Test that a server failure is reported and the exit code is 0."""
        async def boom(manager):
            raise RuntimeError("boom")
        monkeypatch.setattr(cli, "_serve", boom)

        assert main(["-n", "7", "-t", "500"]) == 0

        out = capsys.readouterr().out
        assert "Create ManyObjects:var1 to ManyObjects:var7" in out
        assert "Update (ms): 500" in out
        assert "Catch:boom" in out

    def test_export_written_before_server(self, tmp_path, monkeypatch):
        seen = {}

        async def check_export(manager):
            seen["exists"] = (tmp_path / "testServer.db").exists()
            seen["count"] = manager.config["address_space"]["object_count"]
        monkeypatch.setattr(cli, "_serve", check_export)
        monkeypatch.chdir(tmp_path)

        assert main(["-e", "-n", "5"]) == 0

        assert seen == {"exists": True, "count": 5}
        content = (tmp_path / "testServer.db").read_text(encoding="utf-8")
        assert content.count("record(ai,") == 5

    def test_no_export_without_flag(self, tmp_path, monkeypatch):
        async def noop(manager):
            return None
        monkeypatch.setattr(cli, "_serve", noop)
        monkeypatch.chdir(tmp_path)

        assert main(["-n", "2"]) == 0

        assert not (tmp_path / "testServer.db").exists()

    def test_export_failure_does_not_stop_server(self, tmp_path, capsys, monkeypatch):
        started = []

        async def record_start(manager):
            started.append(True)
        monkeypatch.setattr(cli, "_serve", record_start)
        config_path = tmp_path / "server.json"
        config_path.write_text(json.dumps({
            "export": {"path": str(tmp_path / "missing" / "testServer.db")}
        }))

        assert main(["-c", str(config_path), "-e", "-n", "1"]) == 0

        assert started == [True]
        assert "Failed to write" in capsys.readouterr().out

    def test_bad_config_exits_zero(self, tmp_path, capsys, monkeypatch):
        async def fail(manager):
            raise AssertionError("server must not start")
        monkeypatch.setattr(cli, "_serve", fail)

        assert main(["-c", str(tmp_path / "nope.json")]) == 0
        assert "Failed to load configuration" in capsys.readouterr().out

    def test_keyboard_interrupt(self, capsys, monkeypatch):
        async def interrupted(manager):
            raise KeyboardInterrupt
        monkeypatch.setattr(cli, "_serve", interrupted)

        assert main([]) == 0
        assert "Server stopped" in capsys.readouterr().out
