# =============================================================================
# bitbucket_api/models.py - Data Models (results and projections)
# =============================================================================
#
# Two kinds of shapes live here:
#
#   1. ApiResult - what every HTTP call returns: Ok(data) or Err(error).
#      Exactly one variant per call.  Callers must branch on it (isinstance)
#      or call unwrap(); there is no "maybe it's data" attribute to misuse.
#
#   2. Projections - the reduced views of a Bitbucket pull request that
#      the tools return.  They carry ONLY the fields a caller needs; the
#      upstream payload is much larger.
#
# UPSTREAM SHAPE IS NOT GUARANTEED:
#   Bitbucket omits keys freely (no reviewers → no "reviewers" key, deleted
#   users → no "user" object, ...).  Every nested read therefore goes through
#   dig(), which returns None instead of raising.
# =============================================================================

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar, Union

from bitbucket_api.errors import BitbucketApiError

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Result types
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ApiError:
    """Diagnostic for a failed upstream call."""

    message: str
    status: Optional[int] = None       # None for transport failures


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T


@dataclass(frozen=True)
class Err:
    error: ApiError


ApiResult = Union[Ok[T], Err]


def unwrap(result: "ApiResult[T]") -> T:
    """Return the payload of an Ok, or raise BitbucketApiError for an Err."""
    if isinstance(result, Err):
        raise BitbucketApiError(result.error.message, status=result.error.status)
    return result.data


# -----------------------------------------------------------------------------
# Null-safe field access
# -----------------------------------------------------------------------------
def dig(obj: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing.

    >>> dig({"author": {"user": {"displayName": "Ada"}}}, "author", "user", "displayName")
    'Ada'
    >>> dig({"author": None}, "author", "user", "displayName") is None
    True
    """
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def display_names(participants: Any) -> list[Optional[str]]:
    """Map a Bitbucket participant list to user display names.

    A missing/non-list value gives an empty list.
    """
    if not isinstance(participants, list):
        return []
    return [dig(p, "user", "displayName") for p in participants]


def epoch_millis_to_iso(value: Any) -> Optional[str]:
    """Render Bitbucket's epoch-milliseconds timestamps as ISO-8601 UTC.

    Output matches JavaScript's Date.toISOString(), e.g.
    1700000000000 → "2023-11-14T22:13:20.000Z".  None stays None; anything
    else that can't be converted raises (TypeError/ValueError/OverflowError).
    """
    if value is None:
        return None
    moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# -----------------------------------------------------------------------------
# PullRequestSummary - one row of the "my pull requests" listing
# -----------------------------------------------------------------------------
@dataclass
class PullRequestSummary:
    """Reduced pull request view for the listing tool."""

    id: Optional[int]
    title: Optional[str]
    author: Optional[str]              # author.user.displayName
    reviewers: list[Optional[str]] = field(default_factory=list)
    state: Optional[str] = None        # "OPEN", "MERGED", "DECLINED"
    repository: Optional[str] = None   # "PROJ/repo-slug"
    project_key: Optional[str] = None  # Feed these two back into
    repository_slug: Optional[str] = None  # bitbucketgetpr / bitbucketgetdiff

    @classmethod
    def from_api(cls, pr: dict) -> "PullRequestSummary":
        source_repo = dig(pr, "fromRef", "repository")
        return cls(
            id=dig(pr, "id"),
            title=dig(pr, "title"),
            author=dig(pr, "author", "user", "displayName"),
            reviewers=display_names(dig(pr, "reviewers")),
            state=dig(pr, "state"),
            repository=_repository_full_name(pr),
            project_key=dig(source_repo, "project", "key"),
            repository_slug=dig(source_repo, "slug"),
        )

    def to_dict(self) -> dict:
        """Serialize with the keys bitbucketgetpr / bitbucketgetdiff take as arguments."""
        data = asdict(self)
        data["projectKey"] = data.pop("project_key")
        data["repositorySlug"] = data.pop("repository_slug")
        return data


def _repository_full_name(pr: dict) -> Optional[str]:
    # Cloud-style payloads carry destination.repository.full_name; Server and
    # Data Center carry toRef.repository with a project key and slug.
    full_name = dig(pr, "destination", "repository", "full_name")
    if full_name:
        return full_name
    target = dig(pr, "toRef", "repository")
    project_key = dig(target, "project", "key")
    slug = dig(target, "slug")
    if project_key and slug:
        return f"{project_key}/{slug}"
    return None


# -----------------------------------------------------------------------------
# PullRequestDetails - output of the "get PR info" tool
# -----------------------------------------------------------------------------
@dataclass
class PullRequestDetails:
    """Pull request metadata with timestamps rendered as ISO-8601."""

    id: Optional[int]
    title: Optional[str]
    description: Optional[str]
    author: Optional[str]
    reviewers: list[Optional[str]] = field(default_factory=list)
    state: Optional[str] = None
    created_on: Optional[str] = None
    updated_on: Optional[str] = None

    @classmethod
    def from_api(cls, pr: dict) -> "PullRequestDetails":
        return cls(
            id=dig(pr, "id"),
            title=dig(pr, "title"),
            description=dig(pr, "description"),
            author=dig(pr, "author", "user", "displayName"),
            reviewers=display_names(dig(pr, "reviewers")),
            state=dig(pr, "state"),
            created_on=epoch_millis_to_iso(dig(pr, "createdDate")),
            updated_on=epoch_millis_to_iso(dig(pr, "updatedDate")),
        )
