"""
Shared fixtures: a fake Bitbucket instance served through httpx.MockTransport.
"""

import httpx
import pytest

from bitbucket_api.client import BitbucketClient
from bitbucket_api.config import BitbucketConfig

BASE_URL = "https://bitbucket.test"
TOKEN = "test-token"


class FakeBitbucket:
    """Routes requests by (path, role query param) and records every request.

    Unrouted requests get a Bitbucket-style 404 error body.
    """

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, path, make_response, role=None):
        self.routes[(path, role)] = make_response

    def json(self, path, payload, status=200, role=None):
        self.add(path, lambda: httpx.Response(status, json=payload), role=role)

    def text(self, path, body, status=200, role=None):
        self.add(path, lambda: httpx.Response(status, text=body), role=role)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.url.path, request.url.params.get("role"))
        if key in self.routes:
            return self.routes[key]()
        return httpx.Response(404, json={"errors": [{"message": f"No route for {request.url.path}"}]})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def roles(self) -> list[str]:
        return [r.url.params["role"] for r in self.requests if "role" in r.url.params]


@pytest.fixture
def config():
    return BitbucketConfig(base_url=BASE_URL, token=TOKEN, timeout_seconds=5.0)


@pytest.fixture
def fake():
    return FakeBitbucket()


@pytest.fixture
def client(config, fake):
    return BitbucketClient(config, transport=fake.transport)


def make_pr(pr_id, title="Change", author="Ada Lovelace", reviewers=("Grace Hopper",),
            project="PROJ", slug="service"):
    """A trimmed Bitbucket Server pull request payload."""
    repo = {"slug": slug, "project": {"key": project}}
    return {
        "id": pr_id,
        "title": title,
        "state": "OPEN",
        "author": {"user": {"displayName": author}},
        "reviewers": [{"user": {"displayName": r}} for r in reviewers],
        "fromRef": {"repository": repo},
        "toRef": {"repository": repo},
    }
