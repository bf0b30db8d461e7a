"""
Configuration Loader

Loads the reviewer queue settings from environment variables (a .env
file is picked up by python-dotenv) and the shadows configuration from
the Config sheet (first tab in the Google Sheet).
"""
import json
import os
from dataclasses import dataclass
from typing import Dict, List

from lib.data_types import ShadowMap
from lib.env_constants import (
    CONFIG_SHEET,
    DEFAULT_HTTP_TIMEOUT,
    EXPECTED_HEADERS_FOR_CONFIG,
    REQUIRED_ENV_VARS,
    ConfigColumns,
    is_truthy,
)
from lib.errors import ConfigurationMissing
from lib.utilities import get_remote_sheet, parse_names


@dataclass(frozen=True)
class Settings:
    """
    Reviewer queue settings.

    Attributes:
        github_token: Token for the GitHub REST API
        github_org: Organization owning the repositories
        reviewer_team: Slug of the team whose members are reviewers
        reviewer_email_map: Calendar email to GitHub login
        credential_file: Google service account key file
        sheet_name: Google Sheet holding the Config and State tabs
        travel_calendar_id: Travel calendar, None when not configured
        with_avatar: Print the reviewer avatar URL after assignment
        debug: Only log GitHub write calls instead of sending them
        http_timeout: Seconds before a GitHub/Google request times out
    """

    github_token: str
    github_org: str
    reviewer_team: str
    reviewer_email_map: Dict[str, str]
    credential_file: str
    sheet_name: str
    travel_calendar_id: str | None = None
    with_avatar: bool = False
    debug: bool = False
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def load_settings() -> Settings:
    """
    Read settings from the environment.

    Raises:
        ConfigurationMissing: Lists every required variable that is unset,
            or REVIEWER_EMAIL_MAP / HTTP_TIMEOUT when they cannot be parsed
    """
    missing = [
        name for name in REQUIRED_ENV_VARS if not os.environ.get(name, "").strip()
    ]
    if missing:
        raise ConfigurationMissing(missing)

    try:
        email_map = json.loads(os.environ["REVIEWER_EMAIL_MAP"])
    except json.JSONDecodeError as exc:
        raise ConfigurationMissing(
            [f"REVIEWER_EMAIL_MAP (invalid JSON: {exc})"]
        ) from exc
    if not isinstance(email_map, dict):
        raise ConfigurationMissing(
            ["REVIEWER_EMAIL_MAP (expected a JSON object)"]
        )

    try:
        http_timeout = float(
            os.environ.get("HTTP_TIMEOUT", "").strip() or DEFAULT_HTTP_TIMEOUT
        )
    except ValueError as exc:
        raise ConfigurationMissing(["HTTP_TIMEOUT (not a number)"]) from exc

    return Settings(
        github_token=os.environ["GITHUB_TOKEN"].strip(),
        github_org=os.environ["GITHUB_ORG"].strip(),
        reviewer_team=os.environ["GITHUB_REVIEWER_TEAM"].strip(),
        reviewer_email_map={
            str(email).strip().lower(): str(login).strip()
            for email, login in email_map.items()
        },
        credential_file=os.environ["CREDENTIAL_FILE"].strip(),
        sheet_name=os.environ["SHEET_NAME"].strip(),
        travel_calendar_id=(
            os.environ.get("TRAVEL_CALENDAR_ID", "").strip() or None
        ),
        with_avatar=is_truthy(os.environ.get("GITHUB_WITH_AVATAR")),
        debug=is_truthy(os.environ.get("REVIEWER_QUEUE_DEBUG")),
        http_timeout=http_timeout,
    )


def validate_shadow_map(shadow_map: ShadowMap) -> ShadowMap:
    """
    Drop shadow entries that break the shadows rules.

    - A reviewer cannot shadow themselves
    - Someone listed as a shadow cannot also be a top level reviewer
    """
    top_level = set(shadow_map)
    valid: Dict[str, List[str]] = {}

    for reviewer, shadows in shadow_map.items():
        kept = []
        for shadow in shadows:
            if shadow == reviewer:
                print(f"⚠️  Warning: '{reviewer}' cannot shadow themselves - skipping")
                continue
            if shadow in top_level:
                print(
                    f"⚠️  Warning: '{shadow}' is a top level reviewer and "
                    f"cannot shadow '{reviewer}' - skipping"
                )
                continue
            if shadow not in kept:
                kept.append(shadow)
        if kept:
            valid[reviewer] = kept

    return valid


def load_shadow_map_from_sheet(
    sheet_name: str | None = None,
    credential_file: str | None = None,
) -> ShadowMap:
    """
    Load the shadows configuration from the Config sheet (index 0).

    Args:
        sheet_name: Optional name of the Google Sheet file to open.
            If None, uses SHEET_NAME from environment variable.
        credential_file: Optional service account key file.
            If None, uses CREDENTIAL_FILE from environment variable.

    Expected format:
    - Column A: "Reviewer" with a GitHub login per row
    - Column B: "Shadows" with comma-separated GitHub logins

    Returns:
        Reviewer login to list of shadow logins.
        Falls back to no shadows if the Config sheet is missing or invalid.
    """
    try:
        with get_remote_sheet(CONFIG_SHEET, sheet_name, credential_file) as sheet:
            records = sheet.get_all_records(
                expected_headers=EXPECTED_HEADERS_FOR_CONFIG,
                numericise_ignore=["all"],
            )

        shadow_map: Dict[str, List[str]] = {}
        for record in records:
            reviewer = str(record[ConfigColumns.REVIEWER.value]).strip()
            shadows = parse_names(str(record[ConfigColumns.SHADOWS.value] or ""))
            if reviewer and shadows:
                shadow_map.setdefault(reviewer, []).extend(shadows)

        shadow_map = validate_shadow_map(shadow_map)
        print(f"Config loaded: Reviewers with shadows={len(shadow_map)}")
        for reviewer, shadows in sorted(shadow_map.items()):
            print(f"   {reviewer}: {', '.join(shadows)}")

        return shadow_map

    except Exception as e:  # noqa: BLE001
        print(
            f"Warning: Could not load Config sheet: {e}\n"
            "Using defaults: no shadows"
        )
        return {}
