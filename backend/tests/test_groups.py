"""Tests for group inspection and explicit membership/repository removal endpoints."""
from app.models.group_assignment_repo import GroupAssignmentRepo
from app.models.repo_access import RepoAccess

BASE = "/api/group-assignment-invitations"


def _join_new_group(client, classroom, student, title="Code Squad"):
    resp = client.patch(
        f"{BASE}/{classroom.invitation.key}/accept",
        params={"user_id": student.user_id},
        json={"group": {"title": title}},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestGroupRoutes:
    def test_get_group(self, client, classroom, student):
        body = _join_new_group(client, classroom, student)

        resp = client.get(f"/api/groups/{body['group_id']}")
        assert resp.status_code == 200
        group = resp.json()
        assert group["title"] == "Code Squad"
        assert [m["login"] for m in group["members"]] == ["student-one"]
        assert group["repo"]["repo_id"] == body["repo"]["repo_id"]

    def test_get_group_not_found(self, client):
        assert client.get("/api/groups/missing").status_code == 404

    def test_remove_member(self, client, db, classroom, student, source_control):
        body = _join_new_group(client, classroom, student)

        resp = client.delete(f"/api/groups/{body['group_id']}/members/{student.user_id}")
        assert resp.status_code == 204
        assert db.query(RepoAccess).count() == 0
        assert source_control.removed_org_members == ["student-one"]

        resp = client.delete(f"/api/groups/{body['group_id']}/members/{student.user_id}")
        assert resp.status_code == 404

    def test_delete_repo(self, client, db, classroom, student, source_control):
        body = _join_new_group(client, classroom, student)
        repo = body["repo"]

        resp = client.delete(f"/api/groups/{body['group_id']}/repos/{repo['repo_id']}")
        assert resp.status_code == 204
        assert repo["github_repo_id"] not in source_control.repos
        assert db.get(GroupAssignmentRepo, repo["repo_id"]).active is False

        resp = client.delete(f"/api/groups/{body['group_id']}/repos/{repo['repo_id']}")
        assert resp.status_code == 400

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}
