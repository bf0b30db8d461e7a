"""
Reviewer Command

Chat-style entry point for the round-robin reviewer queue.

Usage:
    python scripts/reviewer_command.py reviewer for <repo> <pull>
    python scripts/reviewer_command.py reviewer show stats
    python scripts/reviewer_command.py reviewer reset stats

A bot prefix is allowed, so the raw chat message can be passed through:
    python scripts/reviewer_command.py "@bot reviewer for web-app 123"

Environment Variables:
    GITHUB_TOKEN, GITHUB_ORG, GITHUB_REVIEWER_TEAM, REVIEWER_EMAIL_MAP,
    CREDENTIAL_FILE, SHEET_NAME (required)
    TRAVEL_CALENDAR_ID, GITHUB_WITH_AVATAR, REVIEWER_QUEUE_DEBUG,
    HTTP_TIMEOUT (optional)

Exit Codes:
    0: Success
    1: No eligible reviewer, or the command was not understood
    2: Configuration missing (the queue is not loaded)
    3: Any other failure (GitHub, Google Sheets, ...)
"""

import argparse
import re
import sys
import traceback
from pathlib import Path
from typing import List, Tuple

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# pylint: next-line: disable=wrong-import-position
from lib.config_loader import (  # noqa: E402
    Settings,
    load_settings,
    load_shadow_map_from_sheet,
)
from lib.data_types import AssignmentResult, StatsRow  # noqa: E402
from lib.errors import (  # noqa: E402
    ConfigurationMissing,
    NoEligibleReviewer,
    ReviewerQueueError,
)
from lib.github_client import GitHubClient  # noqa: E402
from lib.reviewer_service import ReviewerService  # noqa: E402
from lib.state_store import SheetStateStore  # noqa: E402
from lib.travel_calendar import TravelCalendar  # noqa: E402
from lib.utilities import avatar_url_with_cache_buster  # noqa: E402

ASSIGN_COMMAND = "assign"
SHOW_STATS_COMMAND = "show-stats"
RESET_STATS_COMMAND = "reset-stats"

ASSIGN_PATTERN = re.compile(r"reviewer for ([\w\-.]+) (\d+)$", re.IGNORECASE)
SHOW_STATS_PATTERN = re.compile(r"reviewer show stats$", re.IGNORECASE)
RESET_STATS_PATTERN = re.compile(r"reviewer reset stats$", re.IGNORECASE)

STATS_HEADER = "login, percentage, num assigned"


def parse_command(message: str) -> Tuple[str, List[str]] | None:
    """
    Parse a chat message into a command.

    Returns:
        Tuple of (command, arguments), or None if the message is not a
        reviewer command
    """
    message = " ".join(message.split())

    match = ASSIGN_PATTERN.search(message)
    if match:
        return ASSIGN_COMMAND, [match.group(1), match.group(2)]
    if SHOW_STATS_PATTERN.search(message):
        return SHOW_STATS_COMMAND, []
    if RESET_STATS_PATTERN.search(message):
        return RESET_STATS_COMMAND, []
    return None


def format_stats_report(rows: List[StatsRow]) -> str:
    lines = [STATS_HEADER]
    for row in rows:
        lines.append(f"{row.id}, {row.percentage}%, {row.count}")
    return "\n".join(lines)


def format_assignment(result: AssignmentResult, with_avatar: bool = False) -> str:
    lines = [
        f"{result.reviewer.id} has been assigned for "
        f"{result.display_url} as a reviewer"
    ]
    if result.shadows:
        lines.append(f"Shadows also requested: {', '.join(result.shadows)}")
    avatar_url = result.reviewer.attributes.get("avatar_url")
    if with_avatar and avatar_url:
        lines.append(avatar_url_with_cache_buster(avatar_url))
    return "\n".join(lines)


def build_service(settings: Settings) -> ReviewerService:
    """Wire the GitHub, calendar and sheet collaborators into the service"""
    host = GitHubClient(
        token=settings.github_token,
        org=settings.github_org,
        reviewer_team=settings.reviewer_team,
        debug=settings.debug,
        timeout=settings.http_timeout,
    )
    availability = TravelCalendar(
        calendar_id=settings.travel_calendar_id,
        credential_file=settings.credential_file,
        email_map=settings.reviewer_email_map,
        timeout=settings.http_timeout,
    )
    store = SheetStateStore(
        sheet_name=settings.sheet_name,
        credential_file=settings.credential_file,
    )
    shadow_map = load_shadow_map_from_sheet(
        settings.sheet_name, settings.credential_file
    )
    return ReviewerService(host, availability, store, shadow_map)


def run_command(
    service: ReviewerService,
    command: str,
    arguments: List[str],
    with_avatar: bool = False,
) -> str:
    """Run a parsed command and return the reply for the chat user"""
    if command == ASSIGN_COMMAND:
        repo, pr_number = arguments
        result = service.assign_reviewer(repo, int(pr_number))
        return format_assignment(result, with_avatar)
    if command == SHOW_STATS_COMMAND:
        return format_stats_report(service.get_stats_report())
    if command == RESET_STATS_COMMAND:
        service.reset_stats()
        return "Reset reviewer stats!"
    raise ValueError(f"Unknown command: {command}")


def main(argv: List[str] | None = None) -> int:
    """
    Main entry point for the reviewer queue commands.

    Returns:
        Exit code (see module docstring)
    """
    parser = argparse.ArgumentParser(
        description="Round-robin pull request reviewer queue"
    )
    parser.add_argument(
        "message",
        nargs="+",
        help='Chat command, e.g. "reviewer for web-app 123"',
    )
    args = parser.parse_args(argv)

    parsed = parse_command(" ".join(args.message))
    if parsed is None:
        print("❌ Unknown command. Try one of:")
        print("   reviewer for <repo> <pull>")
        print("   reviewer show stats")
        print("   reviewer reset stats")
        return 1
    command, arguments = parsed

    try:
        settings = load_settings()
    except ConfigurationMissing as exc:
        print(f"❌ {exc}")
        return 2

    try:
        service = build_service(settings)
        print(run_command(service, command, arguments, settings.with_avatar))
        return 0
    except NoEligibleReviewer as exc:
        print(f"🤷 {exc}")
        return 1
    except ReviewerQueueError as exc:
        print(f"❌ An error occurred.\n{exc}")
        return 3
    except Exception as exc:  # noqa: BLE001 # pylint: disable=broad-except
        print(f"❌ An error occurred.\n{exc}")
        traceback.print_exc()
        return 3


if __name__ == "__main__":
    sys.exit(main())
