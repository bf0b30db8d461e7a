"""Test utilities for building rosters and reading rotation order."""

from typing import List

from lib.data_types import RosterEntry


def make_roster(*logins: str) -> List[RosterEntry]:
    """
    Build a roster with a fake avatar URL per login.

    Args:
        logins: Reviewer logins in team order
    """
    return [
        RosterEntry(
            id=login,
            attributes={"avatar_url": f"https://avatars.example/{login}"},
        )
        for login in logins
    ]


def ids(entries: List[RosterEntry]) -> List[str]:
    return [entry.id for entry in entries]
