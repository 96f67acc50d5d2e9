"""Tests for the httpx GitHub client against a mocked transport."""
import json

import httpx
import pytest

from app.errors import SourceControlError
from app.models.organization import Organization
from app.services.github_client import GitHubClient, team_slug

ORG = Organization(github_id=4223, login="classroom-testing-org", title="Classroom", github_token="t0k3n")


class FakeGitHub:
    """Minimal GitHub REST surface keyed on (method, path)."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.repos = {77: "classroom-testing-org/html5-the-group"}
        self.team_slugs = {"code-squad"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        if method == "POST" and path == "/orgs/classroom-testing-org/teams":
            return httpx.Response(201, json={"id": 501, "name": json.loads(request.content)["name"]})
        if method == "POST" and path == "/orgs/classroom-testing-org/repos":
            name = json.loads(request.content)["name"]
            if f"classroom-testing-org/{name}" in self.repos.values():
                return httpx.Response(422, json={"message": "name already exists on this account"})
            self.repos[88] = f"classroom-testing-org/{name}"
            return httpx.Response(201, json={"id": 88, "name": name})
        if method == "GET" and path.startswith("/repositories/"):
            repo_id = int(path.rsplit("/", 1)[1])
            if repo_id in self.repos:
                return httpx.Response(200, json={"id": repo_id, "full_name": self.repos[repo_id]})
            return httpx.Response(404, json={"message": "Not Found"})
        if method == "GET" and path.startswith("/repos/"):
            full_name = path[len("/repos/"):]
            if full_name in self.repos.values():
                return httpx.Response(200, json={"full_name": full_name})
            return httpx.Response(404, json={"message": "Not Found"})
        if method == "DELETE" and path.startswith("/repos/"):
            full_name = path[len("/repos/"):]
            self.repos = {k: v for k, v in self.repos.items() if v != full_name}
            return httpx.Response(204)
        if method in ("PUT", "DELETE") and path.startswith("/organizations/4223/team/501/"):
            return httpx.Response(204)
        if method == "GET" and path.startswith("/orgs/classroom-testing-org/teams/"):
            if path.rsplit("/", 1)[1] in self.team_slugs:
                return httpx.Response(200, json={"id": 502, "slug": path.rsplit("/", 1)[1]})
            return httpx.Response(404, json={"message": "Not Found"})
        if method == "DELETE" and path.startswith("/orgs/classroom-testing-org/members/"):
            return httpx.Response(204)
        return httpx.Response(500, text="unexpected request")


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def gh_client(github):
    client = GitHubClient(base_url="https://github.test", timeout=1.0, transport=httpx.MockTransport(github))
    yield client
    client.close()


class TestGitHubClient:
    def test_create_team_sends_token(self, gh_client, github):
        assert gh_client.create_team(ORG, "The Group") == 501
        request = github.requests[-1]
        assert request.headers["Authorization"] == "token t0k3n"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert json.loads(request.content) == {"name": "The Group", "privacy": "secret"}

    def test_create_repository(self, gh_client, github):
        assert gh_client.create_repository(ORG, "html5-code-squad", private=True) == 88
        body = json.loads(github.requests[-1].content)
        assert body["name"] == "html5-code-squad"
        assert body["private"] is True

    def test_create_repository_conflict_raises(self, gh_client):
        with pytest.raises(SourceControlError) as excinfo:
            gh_client.create_repository(ORG, "html5-the-group", private=False)
        assert excinfo.value.status_code == 422
        assert "already exists" in excinfo.value.message

    def test_repository_exists(self, gh_client):
        assert gh_client.repository_exists(ORG, 77) is True
        assert gh_client.repository_exists(ORG, 12345) is False

    def test_repository_name_taken(self, gh_client):
        assert gh_client.repository_name_taken(ORG, "html5-the-group") is True
        assert gh_client.repository_name_taken(ORG, "html5-the-group-1") is False

    def test_team_name_taken_looks_up_slug(self, gh_client, github):
        assert gh_client.team_name_taken(ORG, "Code Squad") is True
        assert github.requests[-1].url.path == "/orgs/classroom-testing-org/teams/code-squad"
        assert gh_client.team_name_taken(ORG, "Code Squad-1") is False

    def test_team_slug(self):
        assert team_slug("The Group") == "the-group"
        assert team_slug("  Code  Squad-1 ") == "code-squad-1"

    def test_add_team_to_repository_uses_full_name(self, gh_client, github):
        gh_client.add_team_to_repository(ORG, 501, 77, "push")
        request = github.requests[-1]
        assert request.method == "PUT"
        assert request.url.path == "/organizations/4223/team/501/repos/classroom-testing-org/html5-the-group"
        assert json.loads(request.content) == {"permission": "push"}

    def test_add_team_to_missing_repository_raises(self, gh_client):
        with pytest.raises(SourceControlError):
            gh_client.add_team_to_repository(ORG, 501, 999, "push")

    def test_team_membership(self, gh_client, github):
        gh_client.add_team_membership(ORG, 501, "student-one")
        assert github.requests[-1].url.path == "/organizations/4223/team/501/memberships/student-one"
        gh_client.remove_team_membership(ORG, 501, "student-one")
        assert github.requests[-1].method == "DELETE"

    def test_delete_repository(self, gh_client, github):
        gh_client.delete_repository(ORG, 77)
        assert github.requests[-1].method == "DELETE"
        assert gh_client.repository_exists(ORG, 77) is False

    def test_delete_missing_repository_is_noop(self, gh_client, github):
        gh_client.delete_repository(ORG, 999)
        assert [r.method for r in github.requests] == ["GET"]

    def test_remove_organization_member(self, gh_client, github):
        gh_client.remove_organization_member(ORG, "student-one")
        assert github.requests[-1].url.path == "/orgs/classroom-testing-org/members/student-one"

    def test_server_error_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))
        client = GitHubClient(base_url="https://github.test", transport=transport)
        with pytest.raises(SourceControlError) as excinfo:
            client.repository_exists(ORG, 77)
        assert excinfo.value.status_code == 502
        assert excinfo.value.response_body == "Bad Gateway"

    def test_network_error_raises(self):
        def _boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GitHubClient(base_url="https://github.test", transport=httpx.MockTransport(_boom))
        with pytest.raises(SourceControlError) as excinfo:
            client.create_team(ORG, "The Group")
        assert excinfo.value.status_code is None
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
