import os
from enum import Enum

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv())

DRIVE_SCOPE = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/drive.file",
]
CALENDAR_SCOPE = ["https://www.googleapis.com/auth/calendar.readonly"]

GITHUB_API_URL = "https://api.github.com"
CALENDAR_EVENTS_URL = (
    "https://www.googleapis.com/calendar/v3/calendars/{calendar_id}/events"
)

# Environment variables that must be set for the queue to load
REQUIRED_ENV_VARS = [
    "GITHUB_TOKEN",
    "GITHUB_ORG",
    "GITHUB_REVIEWER_TEAM",
    "REVIEWER_EMAIL_MAP",
    "CREDENTIAL_FILE",
    "SHEET_NAME",
]


def is_truthy(value: str | None) -> bool:
    """Only "1" and "true" turn a flag on"""
    return (value or "").strip().lower() in ("1", "true")


def get_sheet_name() -> str | None:
    sheet_name = os.environ.get("SHEET_NAME", "").strip()
    return sheet_name or None


# Sheet tabs (0-based index in the Google Sheet file)
class SheetIndices(int, Enum):
    """Tabs of the reviewer queue Google Sheet"""

    CONFIG = 0  # Shadows configuration
    STATE = 1  # Rotation order and assignment counters


CONFIG_SHEET = SheetIndices.CONFIG.value
STATE_SHEET = SheetIndices.STATE.value


# Column names enums
class ConfigColumns(str, Enum):
    """Column names for Configuration sheet"""

    REVIEWER = "Reviewer"  # Top level reviewer login
    SHADOWS = "Shadows"  # Comma-separated shadow logins


class StateColumns(str, Enum):
    """Column names for the State sheet"""

    REVIEWER = "Reviewer"  # Reviewer login, rows follow rotation order
    ASSIGNMENTS = "Assignments"  # Number of times assigned
    ATTRIBUTES = "Attributes"  # JSON display attributes (avatar, profile)
    RETIRED = "Retired"  # "yes" when no longer in the rotation


EXPECTED_HEADERS_FOR_CONFIG = [
    ConfigColumns.REVIEWER.value,
    ConfigColumns.SHADOWS.value,
]

EXPECTED_HEADERS_FOR_STATE = [
    StateColumns.REVIEWER.value,
    StateColumns.ASSIGNMENTS.value,
    StateColumns.ATTRIBUTES.value,
    StateColumns.RETIRED.value,
]

RETIRED_MARKER = "yes"

# GitHub API
GITHUB_PAGE_SIZE = 100
DEFAULT_HTTP_TIMEOUT = 10  # seconds

# Travel calendar query
# There is no way to ask for events happening "now", so we ask for events
# ending after now and drop the ones that have not started yet.
CALENDAR_MAX_RESULTS = 50
