"""
GitHub REST client

The few GitHub calls the reviewer queue needs:
- Members of the reviewer team (the live roster)
- Creator, assignee and URL of a pull request
- Assigning the reviewer and requesting reviews (reviewer + shadows)

In debug mode the write calls are only printed, which makes it safe to
try the queue against a real organization.
"""
from typing import Any, Dict, List

import requests

from lib.data_types import PullRequestContext, RosterEntry
from lib.env_constants import DEFAULT_HTTP_TIMEOUT, GITHUB_API_URL, GITHUB_PAGE_SIZE
from lib.errors import UpstreamFetchFailure


class GitHubClient:
    """Talks to the GitHub REST API on behalf of one organization"""

    def __init__(
        self,
        token: str,
        org: str,
        reviewer_team: str,
        debug: bool = False,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.org = org
        self.reviewer_team = reviewer_team
        self.debug = debug
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        url = f"{GITHUB_API_URL}/{endpoint}"
        try:
            response = self.session.request(
                method, url, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamFetchFailure(
                f"GitHub API {method} {endpoint} failed: {exc}"
            ) from exc

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFetchFailure(
                f"GitHub API {method} {endpoint} returned invalid JSON"
            ) from exc

    def fetch_live_roster(self) -> List[RosterEntry]:
        """
        Fetch the reviewer team members, in the order GitHub lists them.

        Raises:
            UpstreamFetchFailure: On HTTP errors or unexpected payloads
        """
        roster: List[RosterEntry] = []
        page = 1
        while True:
            members = self._request(
                "GET",
                f"orgs/{self.org}/teams/{self.reviewer_team}/members",
                params={"per_page": GITHUB_PAGE_SIZE, "page": page},
            )
            if not isinstance(members, list):
                raise UpstreamFetchFailure(
                    f"Unexpected team members payload for '{self.reviewer_team}'"
                )

            for member in members:
                roster.append(member_to_roster_entry(member))

            if len(members) < GITHUB_PAGE_SIZE:
                break
            page += 1

        return roster

    def fetch_pull_request_context(self, repo: str, number: int) -> PullRequestContext:
        """
        Fetch who opened a pull request and who is assigned to it.

        Raises:
            UpstreamFetchFailure: On HTTP errors or unexpected payloads
        """
        pull = self._request("GET", f"repos/{self.org}/{repo}/pulls/{number}")
        try:
            assignee = pull.get("assignee")
            return PullRequestContext(
                creator_id=pull["user"]["login"],
                current_assignee_id=assignee["login"] if assignee else None,
                display_url=pull["html_url"],
            )
        except (AttributeError, KeyError, TypeError) as exc:
            raise UpstreamFetchFailure(
                f"Unexpected pull request payload for {repo}#{number}"
            ) from exc

    def request_review(
        self, repo: str, number: int, reviewer_id: str, shadow_ids: List[str]
    ) -> None:
        """
        Assign reviewer_id to the pull request and request reviews from
        the reviewer and the shadows.

        Raises:
            UpstreamFetchFailure: If either GitHub call fails
        """
        assignees_payload = {"assignees": [reviewer_id]}
        reviewers_payload = {"reviewers": [reviewer_id, *shadow_ids]}

        if self.debug:
            print(f"🐛 [debug] Would assign {reviewer_id} to {repo}#{number}")
            print(
                f"🐛 [debug] Would request reviews from "
                f"{', '.join(reviewers_payload['reviewers'])}"
            )
            return

        self._request(
            "POST",
            f"repos/{self.org}/{repo}/issues/{number}/assignees",
            json=assignees_payload,
        )
        self._request(
            "POST",
            f"repos/{self.org}/{repo}/pulls/{number}/requested_reviewers",
            json=reviewers_payload,
        )


def member_to_roster_entry(member: Dict[str, Any]) -> RosterEntry:
    try:
        login = member["login"]
    except (KeyError, TypeError) as exc:
        raise UpstreamFetchFailure("Team member without a login") from exc

    attributes = {
        key: member[key]
        for key in ("avatar_url", "html_url")
        if member.get(key)
    }
    return RosterEntry(id=login, attributes=attributes)
