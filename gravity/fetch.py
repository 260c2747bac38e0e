"""
Gravity Lens -- Contribution Fetch

Downloads a user's contribution calendar from the GitHub GraphQL API
and flattens it into ContributionDay records (oldest first).

All user-visible failures of the tool originate here: a missing token,
a non-success HTTP status, or a GraphQL error payload.
"""

from __future__ import annotations

import logging

import requests

from gravity.models import ContributionDay

logger = logging.getLogger(__name__)

GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_TIMEOUT = 30

CONTRIBUTION_QUERY = """
query($username: String!) {
  user(login: $username) {
    contributionsCollection {
      contributionCalendar {
        weeks {
          contributionDays {
            date
            contributionCount
            contributionLevel
          }
        }
      }
    }
  }
}
"""

CONTRIBUTION_LEVELS = {
    "NONE": 0,
    "FIRST_QUARTILE": 1,
    "SECOND_QUARTILE": 2,
    "THIRD_QUARTILE": 3,
    "FOURTH_QUARTILE": 4,
}


class FetchError(Exception):
    """Raised when the contribution calendar cannot be retrieved."""
    pass


def parse_calendar(payload: dict) -> list[ContributionDay]:
    """Flatten a GraphQL response body into ContributionDay records.

    Raises:
        FetchError: If the payload carries GraphQL errors, lacks a calendar
            or holds malformed day entries.
    """
    if not isinstance(payload, dict):
        raise FetchError("Unexpected response shape from GitHub API")

    errors = payload.get("errors")
    if errors:
        raise FetchError(f"GraphQL error: {errors[0].get('message', 'unknown error')}")

    try:
        user = payload["data"]["user"]
        if user is None:
            raise FetchError("GitHub user not found")
        weeks = user["contributionsCollection"]["contributionCalendar"]["weeks"]

        days = []
        for week in weeks:
            for day in week["contributionDays"]:
                days.append(ContributionDay(
                    date=day["date"],
                    count=int(day["contributionCount"]),
                    level=CONTRIBUTION_LEVELS.get(day.get("contributionLevel"), 0),
                ))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise FetchError("Unexpected response shape from GitHub API") from e
    return days


def fetch_contributions(
    username: str,
    token: str,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[ContributionDay]:
    """Fetch the last year of contributions for a GitHub user.

    Args:
        username: GitHub login.
        token: Personal access token (read:user scope is enough).
        session: Optional requests session (connection reuse, testing).
        timeout: Request timeout in seconds.

    Raises:
        FetchError: Missing token, HTTP failure or GraphQL error.
    """
    if not token:
        raise FetchError("GitHub token is required")

    http = session or requests
    try:
        response = http.post(
            GITHUB_GRAPHQL_URL,
            headers={
                "Authorization": f"bearer {token}",
                "Content-Type": "application/json",
            },
            json={"query": CONTRIBUTION_QUERY, "variables": {"username": username}},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise FetchError(f"GitHub API request failed: {e}") from e

    if not response.ok:
        raise FetchError(f"GitHub API error: {response.status_code} {response.reason}")

    try:
        payload = response.json()
    except ValueError as e:
        raise FetchError("GitHub API returned a non-JSON body") from e

    days = parse_calendar(payload)
    logger.info("Fetched %d contribution days for %s", len(days), username)
    return days
