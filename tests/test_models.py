"""
Tests for the projections and null-safe helpers.
"""

import pytest

from bitbucket_api.models import (
    PullRequestDetails,
    PullRequestSummary,
    dig,
    display_names,
    epoch_millis_to_iso,
)

from tests.conftest import make_pr


def test_dig_tolerates_missing_levels():
    payload = {"author": {"user": None}}
    assert dig(payload, "author", "user", "displayName") is None
    assert dig(None, "anything") is None
    assert dig({"a": {"b": 1}}, "a", "b") == 1


def test_display_names_handles_missing_list():
    assert display_names(None) == []
    assert display_names([{"user": {"displayName": "Ada"}}, {}]) == ["Ada", None]


def test_epoch_millis_to_iso_matches_javascript_format():
    assert epoch_millis_to_iso(1700000000000) == "2023-11-14T22:13:20.000Z"
    assert epoch_millis_to_iso(1700000000123) == "2023-11-14T22:13:20.123Z"
    assert epoch_millis_to_iso(None) is None


def test_epoch_millis_to_iso_unparseable_value_raises():
    with pytest.raises(TypeError):
        epoch_millis_to_iso("yesterday")


def test_summary_from_server_payload():
    summary = PullRequestSummary.from_api(make_pr(42, title="Fix login", project="SPAC", slug="ecosystem.go"))

    assert summary == PullRequestSummary(
        id=42,
        title="Fix login",
        author="Ada Lovelace",
        reviewers=["Grace Hopper"],
        state="OPEN",
        repository="SPAC/ecosystem.go",
        project_key="SPAC",
        repository_slug="ecosystem.go",
    )


def test_summary_to_dict_uses_tool_argument_keys():
    data = PullRequestSummary.from_api(make_pr(42, project="SPAC", slug="ecosystem.go")).to_dict()

    assert data["projectKey"] == "SPAC"
    assert data["repositorySlug"] == "ecosystem.go"
    assert "project_key" not in data
    assert "repository_slug" not in data
    assert data["reviewers"] == ["Grace Hopper"]


def test_summary_prefers_destination_full_name():
    pr = make_pr(1)
    pr["destination"] = {"repository": {"full_name": "team/service"}}
    assert PullRequestSummary.from_api(pr).repository == "team/service"


def test_summary_with_missing_fields():
    summary = PullRequestSummary.from_api({"id": 7, "title": "Bare"})

    assert summary.id == 7
    assert summary.reviewers == []
    assert summary.author is None
    assert summary.repository is None
    assert summary.project_key is None
    assert summary.repository_slug is None


def test_details_converts_dates():
    pr = make_pr(5, reviewers=())
    pr.update(description="Body", createdDate=1700000000000, updatedDate=1700000060000)

    details = PullRequestDetails.from_api(pr)

    assert details.description == "Body"
    assert details.reviewers == []
    assert details.created_on == "2023-11-14T22:13:20.000Z"
    assert details.updated_on == "2023-11-14T22:14:20.000Z"


def test_details_missing_dates_are_none():
    details = PullRequestDetails.from_api({"id": 5, "title": "Draft"})

    assert details.created_on is None
    assert details.updated_on is None
