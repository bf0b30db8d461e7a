"""
Rotation state persistence

The rotation state (order + counters) lives in the State tab of the
reviewer queue Google Sheet. The whole tab is one value: it is read in
full and rewritten in full, so a save never leaves a half-written
rotation behind.

Layout (row 1 is the header):
| Reviewer | Assignments | Attributes                  | Retired |
| alice    | 3           | {"avatar_url": "https://…"} |         |
| bob      | 2           | {}                          |         |
| mallory  | 5           | {}                          | yes     |

- Active rows are in rotation order, the last one was assigned last
- Retired rows keep the counters of people who left the team so the
  stats stay complete
"""
import json
from copy import deepcopy
from typing import Dict, List

from lib.data_types import AssignmentState, RosterEntry
from lib.env_constants import (
    EXPECTED_HEADERS_FOR_STATE,
    RETIRED_MARKER,
    STATE_SHEET,
    StateColumns,
)
from lib.errors import PersistenceFailure
from lib.utilities import get_remote_sheet


def state_to_rows(state: AssignmentState) -> List[List[str | int]]:
    """Serialize a state into sheet rows (header included)"""
    rows: List[List[str | int]] = [list(EXPECTED_HEADERS_FOR_STATE)]
    in_order = set()

    for entry in state.order:
        in_order.add(entry.id)
        rows.append(
            [
                entry.id,
                state.counts.get(entry.id, 0),
                json.dumps(entry.attributes, sort_keys=True),
                "",
            ]
        )

    for login in sorted(set(state.counts) - in_order):
        rows.append([login, state.counts[login], "{}", RETIRED_MARKER])

    return rows


def records_to_state(records: List[Dict[str, str]]) -> AssignmentState:
    """Parse State sheet records (as returned by get_all_records)"""
    order: List[RosterEntry] = []
    counts: Dict[str, int] = {}

    for record in records:
        login = str(record[StateColumns.REVIEWER.value]).strip()
        if not login:
            continue

        raw_count = record[StateColumns.ASSIGNMENTS.value]
        count = int(raw_count) if str(raw_count).strip() else 0
        if count < 0:
            raise ValueError(f"Negative assignment count for '{login}': {count}")
        if count:
            counts[login] = count

        retired = str(record[StateColumns.RETIRED.value]).strip().lower()
        if retired == RETIRED_MARKER:
            continue

        raw_attributes = str(record[StateColumns.ATTRIBUTES.value] or "").strip()
        attributes = json.loads(raw_attributes) if raw_attributes else {}
        order.append(RosterEntry(id=login, attributes=attributes))

    return AssignmentState(order=order, counts=counts)


class SheetStateStore:
    """State store backed by the State tab of the Google Sheet"""

    def __init__(
        self,
        sheet_name: str | None = None,
        credential_file: str | None = None,
        sheet_index: int = STATE_SHEET,
    ) -> None:
        self._sheet_name = sheet_name
        self._credential_file = credential_file
        self._sheet_index = sheet_index

    def load_state(self) -> AssignmentState:
        """
        Read the rotation state.

        An empty State tab is a first run and gives an empty state.

        Raises:
            PersistenceFailure: If the sheet cannot be read or parsed
        """
        try:
            with get_remote_sheet(
                self._sheet_index, self._sheet_name, self._credential_file
            ) as sheet:
                if not sheet.row_values(1):
                    print("ℹ️  State sheet is empty - starting a new rotation")
                    return AssignmentState()
                # Logins such as "0042" must not be read back as numbers
                records = sheet.get_all_records(
                    expected_headers=EXPECTED_HEADERS_FOR_STATE,
                    numericise_ignore=["all"],
                )
            return records_to_state(records)
        except Exception as exc:  # noqa: BLE001
            raise PersistenceFailure(f"Could not load rotation state: {exc}") from exc

    def save_state(self, state: AssignmentState) -> None:
        """
        Overwrite the State tab with state.

        Raises:
            PersistenceFailure: If the sheet cannot be written
        """
        rows = state_to_rows(state)
        try:
            with get_remote_sheet(
                self._sheet_index, self._sheet_name, self._credential_file
            ) as sheet:
                # Rows left over from a longer previous state are blanked
                # in the same write
                previous_rows = len(sheet.col_values(1))
                width = len(EXPECTED_HEADERS_FOR_STATE)
                rows.extend([[""] * width for _ in range(previous_rows - len(rows))])
                sheet.update(range_name="A1", values=rows)
        except Exception as exc:  # noqa: BLE001
            raise PersistenceFailure(f"Could not save rotation state: {exc}") from exc


class InMemoryStateStore:
    """State store for tests and dry runs"""

    def __init__(self, state: AssignmentState | None = None) -> None:
        self._state = deepcopy(state) if state is not None else AssignmentState()
        self.save_count = 0

    def load_state(self) -> AssignmentState:
        return deepcopy(self._state)

    def save_state(self, state: AssignmentState) -> None:
        self._state = deepcopy(state)
        self.save_count += 1
