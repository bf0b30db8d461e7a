"""Test fixtures for pytest."""

from typing import Dict, Generator, List, Set
from unittest.mock import patch

import pytest
from gspread import Worksheet

from lib.data_types import AssignmentState, PullRequestContext, RosterEntry
from lib.errors import UpstreamFetchFailure
from lib.reviewer_service import ReviewerService
from lib.state_store import InMemoryStateStore
from tests.utils import make_roster

STATE_SHEET_RECORDS = [
    {
        "Reviewer": "alice",
        "Assignments": 2,
        "Attributes": '{"avatar_url": "https://avatars.example/alice"}',
        "Retired": "",
    },
    {
        "Reviewer": "bob",
        "Assignments": "",
        "Attributes": "",
        "Retired": "",
    },
    {
        "Reviewer": "carol",
        "Assignments": 1,
        "Attributes": "{}",
        "Retired": "",
    },
    {
        "Reviewer": "mallory",
        "Assignments": 4,
        "Attributes": "{}",
        "Retired": "yes",
    },
]


class FakeCodeReviewHost:
    """In-memory GitHub: a team and a set of pull requests"""

    def __init__(self, roster: List[RosterEntry]) -> None:
        self.roster = roster
        self.pull_requests: Dict[int, PullRequestContext] = {}
        self.review_requests: List[tuple] = []
        self.fail_request_review = False

    def add_pull_request(
        self, number: int, creator_id: str, current_assignee_id: str | None = None
    ) -> None:
        self.pull_requests[number] = PullRequestContext(
            creator_id=creator_id,
            current_assignee_id=current_assignee_id,
            display_url=f"https://github.com/acme/web-app/pull/{number}",
        )

    def fetch_live_roster(self) -> List[RosterEntry]:
        return list(self.roster)

    def fetch_pull_request_context(self, repo: str, number: int) -> PullRequestContext:
        return self.pull_requests[number]

    def request_review(
        self, repo: str, number: int, reviewer_id: str, shadow_ids: List[str]
    ) -> None:
        if self.fail_request_review:
            raise UpstreamFetchFailure("GitHub is down")
        self.review_requests.append((repo, number, reviewer_id, list(shadow_ids)))


class FakeAvailability:
    def __init__(self, away: Set[str] | None = None) -> None:
        self.away = away or set()

    def fetch_unavailable_ids(self) -> Set[str]:
        return set(self.away)


@pytest.fixture(scope="function")
def roster() -> List[RosterEntry]:
    """alice, bob, carol in team order"""
    return make_roster("alice", "bob", "carol")


@pytest.fixture(scope="function")
def host(roster: List[RosterEntry]) -> FakeCodeReviewHost:
    return FakeCodeReviewHost(roster)


@pytest.fixture(scope="function")
def availability() -> FakeAvailability:
    return FakeAvailability()


@pytest.fixture(scope="function")
def store() -> InMemoryStateStore:
    return InMemoryStateStore(AssignmentState())


@pytest.fixture(scope="function")
def service(
    host: FakeCodeReviewHost,
    availability: FakeAvailability,
    store: InMemoryStateStore,
) -> ReviewerService:
    return ReviewerService(host, availability, store, shadow_map={})


@pytest.fixture(scope="function")
def mocked_sheet() -> Generator[Worksheet, None, None]:
    """Provide a mocked State worksheet for testing."""
    with patch("lib.state_store.get_remote_sheet") as mocked_get_remote_sheet:
        with mocked_get_remote_sheet() as mocked_sheet:
            yield mocked_sheet
