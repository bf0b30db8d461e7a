"""
Reviewer Service

Runs one reviewer assignment end to end:

1. Fetch the live roster, the pull request and who is away
   (network calls, outside the lock)
2. Under the lock:
   a) Load the rotation state
   b) Run the pure rotation (lib.reviewer_queue.assign)
   c) Assign the reviewer and request reviews on GitHub
   d) Save the new rotation state

The GitHub request goes out before the save, so a failed request never
moves the rotation forward. If the save fails afterwards the review was
requested but the rotation did not advance; running the command again
asks the same reviewer, which GitHub treats as a no-op.

Only one assignment, reset or report runs at a time per service.
"""
import threading
from typing import List

from lib.data_types import (
    AssignmentRequest,
    AssignmentResult,
    AvailabilitySource,
    CodeReviewHost,
    ShadowMap,
    StateStore,
    StatsRow,
)
from lib.reviewer_queue import assign, build_report, reset_state


class ReviewerService:
    def __init__(
        self,
        host: CodeReviewHost,
        availability: AvailabilitySource,
        store: StateStore,
        shadow_map: ShadowMap | None = None,
    ) -> None:
        self.host = host
        self.availability = availability
        self.store = store
        self.shadow_map = shadow_map or {}
        self._lock = threading.Lock()

    def assign_reviewer(self, repo: str, pr_number: int) -> AssignmentResult:
        """
        Pick the next reviewer for a pull request and request the review.

        Args:
            repo: Repository name inside the organization
            pr_number: Pull request number

        Returns:
            AssignmentResult with the reviewer and the shadows asked to review

        Raises:
            NoEligibleReviewer: Nobody can review, nothing was changed
            UpstreamFetchFailure: GitHub failed, nothing was changed
            PersistenceFailure: The state could not be loaded or saved
        """
        print(f"🔄 Assigning reviewer for {repo}#{pr_number}")

        live_roster = self.host.fetch_live_roster()
        pull_request = self.host.fetch_pull_request_context(repo, pr_number)
        unavailable_ids = self.availability.fetch_unavailable_ids()

        print(f"   Team members: {[entry.id for entry in live_roster]}")
        print(f"   Creator: {pull_request.creator_id}")
        print(f"   Current assignee: {pull_request.current_assignee_id or '(none)'}")
        print(f"   Away today: {sorted(unavailable_ids) if unavailable_ids else '(none)'}")

        request = AssignmentRequest(
            creator_id=pull_request.creator_id,
            current_assignee_id=pull_request.current_assignee_id,
            unavailable_ids=unavailable_ids,
            live_roster=live_roster,
        )

        with self._lock:
            state = self.store.load_state()
            new_state, result = assign(state, request, self.shadow_map)
            print(f"   Choose from queue: {result.reviewer.id}")

            self.host.request_review(
                repo, pr_number, result.reviewer.id, result.shadows
            )
            self.store.save_state(new_state)

        result.display_url = pull_request.display_url
        print(
            f"   ✅ Assigned: {result.reviewer.id}"
            + (f" (shadows: {', '.join(result.shadows)})" if result.shadows else "")
        )
        return result

    def reset_stats(self) -> None:
        """Clear the counters and the order; the next assignment rebuilds it"""
        with self._lock:
            self.store.save_state(reset_state())
        print("🧹 Reviewer stats reset")

    def get_stats_report(self) -> List[StatsRow]:
        with self._lock:
            state = self.store.load_state()
        return build_report(state.counts)
