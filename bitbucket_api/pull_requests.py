# =============================================================================
# bitbucket_api/pull_requests.py - Pull Request Tool Logic
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   The three read-only operations behind the MCP tools.  Each one:
#     1. Calls BitbucketClient.get() one or more times
#     2. Reduces the JSON payload to a projection (see models.py)
#     3. Returns either the projection or a plain text message
#
# ERROR CONVENTION:
#   - Upstream failure       → "Error: <upstream message>"
#   - Unresolvable user      → an informational sentence, no prefix
#   - Anything unexpected    → raised; mcp_tools/ renders it as
#                              "Unhandled error: <message>"
#   Callers (LLM agents) tell failures apart from data by these prefixes.
#
# UPSTREAM ENDPOINTS (Bitbucket Server / Data Center REST API):
#   /plugins/servlet/applinks/whoami                 → plain-text username
#   /rest/api/latest/users?filter=<username>          → {"values": [user, ...]}
#   /rest/api/latest/inbox/pull-requests?state&role   → {"values": [pr, ...]}
#   /rest/api/latest/projects/{p}/repos/{r}/pull-requests/{id}[.diff]
# =============================================================================

import logging
from typing import Union
from urllib.parse import quote

from bitbucket_api.client import BitbucketClient
from bitbucket_api.errors import BitbucketApiError
from bitbucket_api.models import PullRequestDetails, PullRequestSummary, dig, unwrap

logger = logging.getLogger(__name__)

WHOAMI_PATH = "/plugins/servlet/applinks/whoami"
USERS_PATH = "/rest/api/latest/users"
INBOX_PATH = "/rest/api/latest/inbox/pull-requests"

ROLES = ("author", "reviewer", "all")


def _segment(value) -> str:
    """Escape one caller-supplied path segment.

    "/", "#" and "?" are percent-encoded so a value can never leave its
    segment; bare "." and ".." are refused because URL normalisation would
    still collapse them.
    """
    text = str(value)
    if text in ("", ".", ".."):
        raise ValueError(f"Invalid path segment {text!r}")
    return quote(text, safe="")


def pull_request_path(project_key: str, repository_slug: str, pr_id: int) -> str:
    return (f"/rest/api/latest/projects/{_segment(project_key)}"
            f"/repos/{_segment(repository_slug)}/pull-requests/{_segment(pr_id)}")


def roles_to_query(role: str) -> list[str]:
    """Expand the tool's role filter into inbox query roles, in query order."""
    if role not in ROLES:
        raise ValueError(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}")
    if role == "all":
        return ["AUTHOR", "REVIEWER"]
    return [role.upper()]


def dedupe_by_id(items: list[dict]) -> list[dict]:
    """Drop repeated pull requests, keeping the first copy of each id."""
    seen = set()
    unique = []
    for item in items:
        pr_id = dig(item, "id")
        if pr_id in seen:
            continue
        seen.add(pr_id)
        unique.append(item)
    return unique


# =============================================================================
# list-my-pull-requests
# =============================================================================
async def list_my_pull_requests(
    client: BitbucketClient, role: str = "all"
) -> Union[list[PullRequestSummary], str]:
    """List open pull requests where the token's user is author and/or reviewer.

    The calls are strictly sequential: whoami → user lookup → one inbox
    query per role (AUTHOR before REVIEWER).  The first failing call ends
    the operation; later calls are never issued.
    """
    roles = roles_to_query(role)

    try:
        username = unwrap(await client.get(WHOAMI_PATH, response_format="text")).strip()

        users = unwrap(await client.get(USERS_PATH, params={"filter": username}))
        matches = dig(users, "values") or []
        user = matches[0] if matches else None
        if not dig(user, "slug"):
            logger.info("No user with a slug matched %r", username)
            return f"Failed to resolve current user slug for '{username}'"

        collected: list[dict] = []
        for r in roles:
            page = unwrap(await client.get(INBOX_PATH, params={"state": "OPEN", "role": r}))
            values = dig(page, "values") or []
            logger.debug("Inbox role=%s returned %d pull requests", r, len(values))
            collected.extend(values)
    except BitbucketApiError as e:
        return f"Error: {e.message}"

    return [PullRequestSummary.from_api(pr) for pr in dedupe_by_id(collected)]


# =============================================================================
# get-pull-request-info
# =============================================================================
async def get_pull_request_info(
    client: BitbucketClient, project_key: str, repository_slug: str, pr_id: int
) -> Union[PullRequestDetails, str]:
    """Fetch one pull request and project it with ISO-8601 timestamps."""
    try:
        pr = unwrap(await client.get(pull_request_path(project_key, repository_slug, pr_id)))
    except BitbucketApiError as e:
        return f"Error: {e.message}"
    return PullRequestDetails.from_api(pr)


# =============================================================================
# get-pull-request-diff
# =============================================================================
async def get_pull_request_diff(
    client: BitbucketClient, project_key: str, repository_slug: str, pr_id: int
) -> str:
    """Fetch the unified diff of a pull request, verbatim."""
    result = await client.get(
        pull_request_path(project_key, repository_slug, pr_id) + ".diff",
        headers={"Accept": "text/plain"},
        response_format="text",
    )
    try:
        return unwrap(result)
    except BitbucketApiError as e:
        return f"Error: {e.message}"
