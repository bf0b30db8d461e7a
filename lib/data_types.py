"""Data type definitions for the reviewer queue."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Set


@dataclass(frozen=True)
class RosterEntry:
    """
    A reviewer in the rotation.

    Attributes:
        id: Reviewer login, compared by exact string match
        attributes: Display data passed through untouched
            (avatar_url, html_url, ...)
    """

    id: str
    attributes: Dict[str, str] = field(default_factory=dict, compare=False)


@dataclass
class AssignmentState:
    """
    The persisted rotation state.

    Attributes:
        order: Rotation order, the tail is the most recently assigned
        counts: Number of assignments per reviewer login
    """

    order: List[RosterEntry] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class AssignmentRequest:
    """Everything the queue needs to know about one pull request."""

    creator_id: str
    live_roster: List[RosterEntry]
    current_assignee_id: Optional[str] = None
    unavailable_ids: Set[str] = field(default_factory=set)


@dataclass
class AssignmentResult:
    reviewer: RosterEntry
    shadows: List[str] = field(default_factory=list)
    display_url: str = ""


@dataclass(frozen=True)
class StatsRow:
    id: str
    count: int
    percentage: int


@dataclass(frozen=True)
class PullRequestContext:
    creator_id: str
    current_assignee_id: Optional[str]
    display_url: str


ShadowMap = Dict[str, List[str]]


class StateStore(Protocol):
    def load_state(self) -> AssignmentState:
        ...

    def save_state(self, state: AssignmentState) -> None:
        ...


class CodeReviewHost(Protocol):
    def fetch_live_roster(self) -> List[RosterEntry]:
        ...

    def fetch_pull_request_context(
        self, repo: str, number: int
    ) -> PullRequestContext:
        ...

    def request_review(
        self, repo: str, number: int, reviewer_id: str, shadow_ids: List[str]
    ) -> None:
        ...


class AvailabilitySource(Protocol):
    def fetch_unavailable_ids(self) -> Set[str]:
        ...
