"""
Travel calendar

Finds out who is away today from the team travel calendar (Google
Calendar). An event counts when it has started and not ended yet; its
creator email is mapped to a GitHub login with REVIEWER_EMAIL_MAP.

Availability is best effort: when the calendar cannot be read the
failure is printed and nobody is treated as away.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Set

import requests
from oauth2client.service_account import ServiceAccountCredentials

from lib.env_constants import (
    CALENDAR_EVENTS_URL,
    CALENDAR_MAX_RESULTS,
    CALENDAR_SCOPE,
    DEFAULT_HTTP_TIMEOUT,
)
from lib.errors import UpstreamUnavailabilityFailure


def parse_event_start(event: Dict[str, Any]) -> datetime:
    """Start of an event, all-day events start at midnight UTC"""
    start = event["start"]
    raw = start.get("dateTime") or start["date"]
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def events_to_unavailable_ids(
    events: List[Dict[str, Any]],
    email_map: Dict[str, str],
    now: datetime,
) -> Set[str]:
    """Logins of the creators of events that already started"""
    away: Set[str] = set()
    for event in events:
        if parse_event_start(event) >= now:
            continue
        email = (event.get("creator") or {}).get("email", "").strip().lower()
        login = email_map.get(email)
        if login:
            away.add(login)
        else:
            print(f"   ⚠️  Travel event by unknown email '{email}' - ignoring")
    return away


class TravelCalendar:
    """Reads the travel calendar with the service account credentials"""

    def __init__(
        self,
        calendar_id: str | None,
        credential_file: str,
        email_map: Dict[str, str],
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self.calendar_id = calendar_id
        self.credential_file = credential_file
        self.email_map = email_map
        self.timeout = timeout

    def _access_token(self) -> str:
        credential = ServiceAccountCredentials.from_json_keyfile_name(
            self.credential_file, CALENDAR_SCOPE
        )
        return credential.get_access_token().access_token

    def fetch_travel_events(self, now: datetime) -> List[Dict[str, Any]]:
        """
        Fetch the calendar events that end after now.

        Raises:
            UpstreamUnavailabilityFailure: On auth, HTTP or payload errors
        """
        try:
            response = requests.get(
                CALENDAR_EVENTS_URL.format(calendar_id=self.calendar_id),
                headers={"Authorization": f"Bearer {self._access_token()}"},
                params={
                    "timeMin": now.isoformat(),
                    "maxResults": CALENDAR_MAX_RESULTS,
                    "singleEvents": "true",
                    "orderBy": "startTime",
                    "timeZone": "UTC",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()["items"]
        except Exception as exc:  # noqa: BLE001
            raise UpstreamUnavailabilityFailure(
                f"Error fetching travel calendar events: {exc}"
            ) from exc

    def fetch_unavailable_ids(self) -> Set[str]:
        """Logins of people travelling right now, empty on any failure"""
        if not self.calendar_id:
            return set()

        now = datetime.now(timezone.utc)
        try:
            events = self.fetch_travel_events(now)
            away = events_to_unavailable_ids(events, self.email_map, now)
        except UpstreamUnavailabilityFailure as exc:
            print(f"⚠️  {exc} - assuming nobody is away")
            return set()
        except (KeyError, TypeError, ValueError) as exc:
            print(f"⚠️  Malformed travel calendar event: {exc} - assuming nobody is away")
            return set()

        print(f"📅 Fetched {len(events)} travel events, away today: {sorted(away)}")
        return away
