"""Tests for the uoa-calendar CLI."""

import os
from unittest.mock import patch

import pytest

from uoa_calendar.cli import main


@pytest.fixture
def cli_server(server, make_client):
    """Route every CLI-created client to the fake server."""
    with patch("uoa_calendar.client.CalendarClient", lambda: make_client(server)):
        yield server


class TestCli:
    """Test CLI commands end to end."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "uoa-calendar" in capsys.readouterr().out

    def test_status(self, capsys):
        with patch.dict(os.environ, {"UOA_CALENDAR_API_TOKEN": "t"}, clear=True):
            assert main(["status"]) == 0
        out = capsys.readouterr().out
        assert "API token:   [x]" in out
        assert "(default)" in out

    def test_calendars_add_and_list(self, cli_server, capsys):
        assert main(["calendars", "add", "test"]) == 0
        assert main(["calendars", "list"]) == 0

        out = capsys.readouterr().out
        assert "created calendar 1 'test'" in out
        assert "     1  test" in out

    def test_events_find(self, cli_server, capsys):
        main(["calendars", "add", "test"])
        for day in ("2015-12-01", "2015-12-02", "2015-12-03"):
            assert main(["events", "add", "1", "--title", day, "--start", day, "--end", day]) == 0

        assert main(["events", "find", "1", "--start", "2015-12-02", "--end", "2015-12-02"]) == 0

        out = capsys.readouterr().out
        assert "1 events overlapping 2015-12-02 .. 2015-12-02" in out
        assert "2015-12-02T00:00:00 -> 2015-12-02T00:00:00  2015-12-02" in out

    def test_events_delete(self, cli_server, capsys):
        main(["calendars", "add", "test"])
        main(["events", "add", "1", "--title", "x", "--start", "2015-12-01", "--end", "2015-12-01"])

        assert main(["events", "delete", "1", "1"]) == 0
        assert cli_server.events == {}

    def test_failure_exit_code(self, cli_server, capsys):
        assert main(["calendars", "delete", "9"]) == 1
        assert "[✗]" in capsys.readouterr().out

    def test_test_command(self, cli_server, capsys):
        assert main(["test"]) == 0
        assert "connected to" in capsys.readouterr().out

    def test_rejects_bad_dates(self, capsys):
        with pytest.raises(SystemExit):
            main(["events", "find", "1", "--start", "yesterday", "--end", "2015-12-02"])
        assert "not an ISO-8601 date/time" in capsys.readouterr().err
