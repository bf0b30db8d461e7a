"""
Round-robin reviewer queue

Pure functions that pick the next reviewer for a pull request and keep
the fairness statistics. Nothing in here talks to GitHub, Google or any
storage; ReviewerService loads the state, calls assign() and saves the
result.

ROTATION LOGIC:
1. Reconcile: the persisted order is synced with the live roster.
   - Members still in the team keep their relative position
   - New members are appended at the end (they wait their turn)
   - Members who left are dropped from the order (their counts stay)
   - The order is only rebuilt when the member SET changed

2. Filter: members that cannot review this pull request are skipped
   - The pull request creator
   - The current assignee
   - Anyone on the travel calendar today
   - Configured shadows, who never enter the order at all

3. Select: the first eligible member of the order is picked and moved
   to the end of the order. The head of the order is always the member
   who waited longest since their last review.

4. Shadows: the configured shadows of the picked reviewer are added to
   the review request (never the creator). Shadows are not rotated and
   not counted, even when they are members of the reviewer team.

5. Record: the picked reviewer's counter is incremented by one.

EXAMPLE:
Order: alice, bob, carol
PR by alice → alice skipped, bob picked → order: alice, carol, bob
PR by dave  → alice picked            → order: carol, bob, alice
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from lib.data_types import (
    AssignmentRequest,
    AssignmentResult,
    AssignmentState,
    RosterEntry,
    ShadowMap,
    StatsRow,
)
from lib.errors import NoEligibleReviewer


def reconcile(
    persisted_order: List[RosterEntry], live_roster: List[RosterEntry]
) -> List[RosterEntry]:
    """
    Sync the persisted rotation order with the live roster.

    Args:
        persisted_order: Order loaded from the state store
        live_roster: Members currently in the reviewer team, in team order

    Returns:
        The persisted order if both hold the same ids, otherwise the
        surviving persisted entries followed by the new live entries.
        Entries always carry the live roster's attributes.
    """
    live_by_id: Dict[str, RosterEntry] = {}
    for entry in live_roster:
        live_by_id.setdefault(entry.id, entry)
    persisted_ids = {entry.id for entry in persisted_order}

    if persisted_order and persisted_ids == set(live_by_id):
        return [live_by_id[entry.id] for entry in persisted_order]

    new_order = [
        live_by_id[entry.id] for entry in persisted_order if entry.id in live_by_id
    ]
    seen = {entry.id for entry in new_order}
    for entry in live_roster:
        if entry.id not in seen:
            new_order.append(entry)
            seen.add(entry.id)

    return new_order


def filter_eligible(
    order: List[RosterEntry],
    creator_id: str,
    current_assignee_id: Optional[str] = None,
    unavailable_ids: Iterable[str] = (),
) -> List[RosterEntry]:
    """Return the members of order that may review, keeping their order"""
    excluded: Set[str] = {creator_id, *unavailable_ids}
    if current_assignee_id is not None:
        excluded.add(current_assignee_id)

    return [entry for entry in order if entry.id not in excluded]


def select_reviewer(
    order: List[RosterEntry], eligible_order: List[RosterEntry]
) -> Tuple[RosterEntry, List[RosterEntry]]:
    """
    Pick the head of eligible_order and move it to the tail of order.

    Raises:
        NoEligibleReviewer: If eligible_order is empty. order is untouched.
    """
    if not eligible_order:
        raise NoEligibleReviewer(
            "No eligible reviewer: every team member is the creator, "
            "the current assignee, away or only a shadow"
        )

    reviewer = eligible_order[0]
    new_order = [entry for entry in order if entry.id != reviewer.id]
    new_order.append(reviewer)

    return reviewer, new_order


def resolve_shadows(
    reviewer_id: str, shadow_map: ShadowMap, creator_id: str
) -> List[str]:
    """Shadows of reviewer_id in configured order, without the creator"""
    return [
        shadow
        for shadow in shadow_map.get(reviewer_id, [])
        if shadow != creator_id
    ]


def shadowed_ids(shadow_map: ShadowMap) -> Set[str]:
    """Everyone configured as somebody's shadow"""
    return set().union(*shadow_map.values())


def record_assignment(counts: Dict[str, int], reviewer_id: str) -> Dict[str, int]:
    new_counts = dict(counts)
    new_counts[reviewer_id] = new_counts.get(reviewer_id, 0) + 1
    return new_counts


def build_report(counts: Dict[str, int]) -> List[StatsRow]:
    """
    Build the fairness report.

    Percentages are floored, so they add up to 100 at most. An empty
    report is returned when nobody was assigned yet.
    """
    total = sum(counts.values())
    if total == 0:
        return []

    rows = [
        StatsRow(id=login, count=count, percentage=count * 100 // total)
        for login, count in counts.items()
    ]
    rows.sort(key=lambda row: (-row.count, row.id))
    return rows


def reset_state() -> AssignmentState:
    return AssignmentState(order=[], counts={})


def assign(
    state: AssignmentState,
    request: AssignmentRequest,
    shadow_map: ShadowMap,
) -> Tuple[AssignmentState, AssignmentResult]:
    """
    Run one assignment against state without mutating it.

    Args:
        state: Current persisted state
        request: Creator, assignee, unavailable ids and live roster
        shadow_map: Reviewer login to shadow logins

    Returns:
        Tuple of (new_state, result)

    Raises:
        NoEligibleReviewer: Nobody can review; the caller keeps state as is.
    """
    shadows_only = shadowed_ids(shadow_map)
    rotation_roster = [
        entry for entry in request.live_roster if entry.id not in shadows_only
    ]
    order = reconcile(state.order, rotation_roster)
    eligible = filter_eligible(
        order,
        request.creator_id,
        request.current_assignee_id,
        request.unavailable_ids,
    )
    reviewer, new_order = select_reviewer(order, eligible)
    shadows = resolve_shadows(reviewer.id, shadow_map, request.creator_id)
    new_counts = record_assignment(state.counts, reviewer.id)

    return (
        AssignmentState(order=new_order, counts=new_counts),
        AssignmentResult(reviewer=reviewer, shadows=shadows),
    )
