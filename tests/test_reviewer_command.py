"""Tests for the reviewer chat command entry point"""

import os
from unittest.mock import MagicMock, patch

import pytest

from lib.config_loader import load_settings
from lib.data_types import AssignmentResult, RosterEntry, StatsRow
from lib.errors import NoEligibleReviewer, PersistenceFailure
from lib.github_client import GitHubClient
from lib.state_store import SheetStateStore
from lib.travel_calendar import TravelCalendar
from scripts.reviewer_command import (
    ASSIGN_COMMAND,
    RESET_STATS_COMMAND,
    SHOW_STATS_COMMAND,
    build_service,
    format_assignment,
    format_stats_report,
    main,
    parse_command,
    run_command,
)
from tests.test_config_loader import FULL_ENV


class TestParseCommand:
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("reviewer for web-app 42", (ASSIGN_COMMAND, ["web-app", "42"])),
            ("@bot reviewer for my.repo_2 7", (ASSIGN_COMMAND, ["my.repo_2", "7"])),
            ("Reviewer  For  web-app   42", (ASSIGN_COMMAND, ["web-app", "42"])),
            ("reviewer show stats", (SHOW_STATS_COMMAND, [])),
            ("bot REVIEWER SHOW STATS", (SHOW_STATS_COMMAND, [])),
            ("reviewer reset stats", (RESET_STATS_COMMAND, [])),
        ],
    )
    def test_known_commands(self, message, expected):
        assert parse_command(message) == expected

    @pytest.mark.parametrize(
        "message",
        [
            "reviewer for web-app",
            "reviewer for web-app abc",
            "reviewer show stats please",
            "hello",
        ],
    )
    def test_unknown_commands(self, message):
        assert parse_command(message) is None


class TestFormatting:
    def test_stats_report(self):
        rows = [StatsRow("alice", 2, 66), StatsRow("bob", 1, 33)]

        assert format_stats_report(rows) == (
            "login, percentage, num assigned\nalice, 66%, 2\nbob, 33%, 1"
        )

    def test_empty_stats_report(self):
        assert format_stats_report([]) == "login, percentage, num assigned"

    def test_assignment(self):
        result = AssignmentResult(
            reviewer=RosterEntry("alice", {"avatar_url": "https://avatars.example/alice"}),
            shadows=["zoe"],
            display_url="https://github.com/acme/web-app/pull/42",
        )

        assert format_assignment(result) == (
            "alice has been assigned for https://github.com/acme/web-app/pull/42 "
            "as a reviewer\nShadows also requested: zoe"
        )

    @patch("lib.utilities.time.time", return_value=1700000000.5)
    def test_assignment_with_avatar(self, _mocked_time):
        result = AssignmentResult(
            reviewer=RosterEntry("alice", {"avatar_url": "https://avatars.example/alice?v=4"}),
            display_url="https://x",
        )

        lines = format_assignment(result, with_avatar=True).splitlines()

        assert lines[-1] == "https://avatars.example/alice?v=4&t=1700000000500#.png"


class TestRunCommand:
    def test_assign(self):
        service = MagicMock()
        service.assign_reviewer.return_value = AssignmentResult(
            reviewer=RosterEntry("bob"), display_url="https://x"
        )

        reply = run_command(service, ASSIGN_COMMAND, ["web-app", "42"])

        service.assign_reviewer.assert_called_once_with("web-app", 42)
        assert reply == "bob has been assigned for https://x as a reviewer"

    def test_reset(self):
        service = MagicMock()

        assert run_command(service, RESET_STATS_COMMAND, []) == "Reset reviewer stats!"
        service.reset_stats.assert_called_once()


class TestMain:
    def test_unknown_command(self, capsys):
        assert main(["hello"]) == 1
        assert "Unknown command" in capsys.readouterr().out

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_configuration(self, capsys):
        assert main(["reviewer", "show", "stats"]) == 2
        assert "missing configuration" in capsys.readouterr().out

    @patch.dict(os.environ, FULL_ENV, clear=True)
    @patch("scripts.reviewer_command.build_service")
    def test_show_stats(self, mocked_build_service, capsys):
        mocked_build_service.return_value.get_stats_report.return_value = [
            StatsRow("alice", 1, 100)
        ]

        assert main(["reviewer show stats"]) == 0
        assert "alice, 100%, 1" in capsys.readouterr().out

    @patch.dict(os.environ, FULL_ENV, clear=True)
    @patch("scripts.reviewer_command.build_service")
    def test_no_eligible_reviewer(self, mocked_build_service, capsys):
        mocked_build_service.return_value.assign_reviewer.side_effect = NoEligibleReviewer(
            "No eligible reviewer"
        )

        assert main(["reviewer", "for", "web-app", "1"]) == 1
        assert "No eligible reviewer" in capsys.readouterr().out

    @patch.dict(os.environ, FULL_ENV, clear=True)
    @patch("scripts.reviewer_command.build_service")
    def test_queue_failure(self, mocked_build_service, capsys):
        mocked_build_service.return_value.assign_reviewer.side_effect = PersistenceFailure(
            "Could not save rotation state"
        )

        assert main(["reviewer", "for", "web-app", "1"]) == 3
        assert "An error occurred" in capsys.readouterr().out


class TestBuildService:
    @patch.dict(
        os.environ,
        {**FULL_ENV, "TRAVEL_CALENDAR_ID": "travel-cal", "REVIEWER_QUEUE_DEBUG": "true"},
        clear=True,
    )
    @patch("scripts.reviewer_command.load_shadow_map_from_sheet")
    def test_wires_collaborators(self, mocked_load_shadow_map):
        mocked_load_shadow_map.return_value = {"alice": ["zoe"]}
        settings = load_settings()

        service = build_service(settings)

        assert isinstance(service.host, GitHubClient)
        assert service.host.org == "acme"
        assert service.host.debug is True
        assert isinstance(service.availability, TravelCalendar)
        assert service.availability.calendar_id == "travel-cal"
        assert isinstance(service.store, SheetStateStore)
        assert service.shadow_map == {"alice": ["zoe"]}
        mocked_load_shadow_map.assert_called_once_with(
            "Reviewer Queue", "credential_file.json"
        )
