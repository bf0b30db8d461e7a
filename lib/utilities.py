import os
import re
import time
from contextlib import contextmanager
from typing import Iterator, List

import gspread
from gspread import Worksheet
from oauth2client.service_account import ServiceAccountCredentials
from dotenv import find_dotenv, load_dotenv

from lib.env_constants import DRIVE_SCOPE, STATE_SHEET, get_sheet_name

load_dotenv(find_dotenv())


def parse_names(names_str: str) -> List[str]:
    """Parse comma-separated logins into a list, keeping their order"""
    if not names_str:
        return []
    names: List[str] = []
    for name in names_str.split(","):
        name = name.strip().lstrip("@")
        if name and name not in names:
            names.append(name)
    return names


def avatar_url_with_cache_buster(url: str, now_ms: int | None = None) -> str:
    """
    Make an avatar URL that chat clients re-fetch and render inline.

    Appends a "t=<millis>" cache buster and a "#.png" fragment so the
    URL looks like an image (replacing any existing fragment).
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    url = re.sub(r"#.*$", "", url)
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}t={now_ms}#.png"


@contextmanager
def get_remote_sheet(
    sheet_index: int = STATE_SHEET,
    sheet_name: str | None = None,
    credential_file: str | None = None,
) -> Iterator[Worksheet]:
    """
    Fetch the Worksheet data from remote Google sheet

    Args:
        sheet_index: Index of the sheet tab (0=Config, 1=State)
        sheet_name: Name of the Google Sheet file to open.
            If None, uses SHEET_NAME environment variable.
        credential_file: Service account key file.
            If None, uses CREDENTIAL_FILE environment variable.
    """
    if credential_file is None:
        credential_file = os.environ.get("CREDENTIAL_FILE")

    if sheet_name is None:
        sheet_name = get_sheet_name()

    if not sheet_name:
        raise ValueError(
            "Sheet name must be provided either as parameter or "
            "via SHEET_NAME environment variable"
        )

    credential = ServiceAccountCredentials.from_json_keyfile_name(
        credential_file, DRIVE_SCOPE
    )
    client = gspread.authorize(credential)
    try:
        spreadsheet = client.open(sheet_name)
        # Get sheet by index (0-based)
        sheet = spreadsheet.get_worksheet(sheet_index)
        yield sheet
    finally:
        client.session.close()
