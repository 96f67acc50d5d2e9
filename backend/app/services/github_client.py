"""GitHub REST client implementing the source-control ports with httpx.

Each call authenticates with the organization's stored token. Failures,
including network errors, surface as ``SourceControlError``; a 404 from an
existence check is an answer, not an error.
"""
import logging
import re
from functools import lru_cache
from typing import Any, Optional

import httpx

from app.config import settings
from app.errors import SourceControlError
from app.models.organization import Organization

logger = logging.getLogger(__name__)

GITHUB_MEDIA_TYPE = "application/vnd.github+json"

_NON_TEAM_SLUG_CHARS = re.compile(r"[^a-z0-9_]+")


def team_slug(name: str) -> str:
    """The slug GitHub derives from a team name, used in team URLs."""
    return _NON_TEAM_SLUG_CHARS.sub("-", name.lower()).strip("-")


class GitHubClient:
    """Synchronous GitHub client shared across requests.

    Example:
        client = GitHubClient()
        team_id = client.create_team(org, "Code Squad")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=(base_url or settings.GITHUB_API_URL).rstrip("/"),
            timeout=timeout if timeout is not None else settings.GITHUB_TIMEOUT_SECONDS,
            headers={"Accept": GITHUB_MEDIA_TYPE},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        org: Organization,
        method: str,
        path: str,
        operation: str,
        json: Optional[dict[str, Any]] = None,
        allow_404: bool = False,
    ) -> Optional[httpx.Response]:
        """Send an authenticated request and raise on anything but success.

        Returns None for a 404 when ``allow_404`` is set.
        """
        try:
            response = self._client.request(
                method,
                path,
                json=json,
                headers={"Authorization": f"token {org.github_token}"},
            )
        except httpx.RequestError as exc:
            raise SourceControlError(
                f"{operation} failed: {exc}",
                details={"method": method, "path": path},
            ) from exc

        if response.status_code == 404 and allow_404:
            return None
        if response.is_success:
            return response

        try:
            detail = response.json().get("message", response.text)
        except ValueError:
            detail = response.text
        raise SourceControlError(
            f"{operation} failed: {detail}",
            status_code=response.status_code,
            response_body=response.text,
            details={"method": method, "path": path},
        )

    def _repository_full_name(self, org: Organization, repo_id: int) -> Optional[str]:
        response = self._request(org, "GET", f"/repositories/{repo_id}", "Fetch repository", allow_404=True)
        if response is None:
            return None
        return response.json()["full_name"]

    # ── SourceControlAPI ─────────────────────────────────────────────

    def create_team(self, org: Organization, name: str) -> int:
        response = self._request(
            org, "POST", f"/orgs/{org.login}/teams", "Create team",
            json={"name": name, "privacy": "secret"},
        )
        team_id = response.json()["id"]
        logger.info("Created GitHub team '%s' (%s) in %s", name, team_id, org.login)
        return team_id

    def create_repository(self, org: Organization, name: str, private: bool) -> int:
        response = self._request(
            org, "POST", f"/orgs/{org.login}/repos", "Create repository",
            json={"name": name, "private": private, "has_wiki": False},
        )
        repo_id = response.json()["id"]
        logger.info("Created GitHub repository %s/%s (%s)", org.login, name, repo_id)
        return repo_id

    def add_team_to_repository(self, org: Organization, team_id: int, repo_id: int, permission: str) -> None:
        full_name = self._repository_full_name(org, repo_id)
        if full_name is None:
            raise SourceControlError(
                "Add team to repository failed: repository not found",
                status_code=404,
                details={"team_id": team_id, "repo_id": repo_id},
            )
        self._request(
            org, "PUT", f"/organizations/{org.github_id}/team/{team_id}/repos/{full_name}",
            "Add team to repository",
            json={"permission": permission},
        )

    def add_team_membership(self, org: Organization, team_id: int, login: str) -> None:
        self._request(
            org, "PUT", f"/organizations/{org.github_id}/team/{team_id}/memberships/{login}",
            "Add team membership",
            json={"role": "member"},
        )

    def remove_team_membership(self, org: Organization, team_id: int, login: str) -> None:
        self._request(
            org, "DELETE", f"/organizations/{org.github_id}/team/{team_id}/memberships/{login}",
            "Remove team membership",
            allow_404=True,
        )

    def repository_exists(self, org: Organization, repo_id: int) -> bool:
        return self._repository_full_name(org, repo_id) is not None

    def repository_name_taken(self, org: Organization, name: str) -> bool:
        response = self._request(
            org, "GET", f"/repos/{org.login}/{name}", "Check repository name", allow_404=True
        )
        return response is not None

    def team_name_taken(self, org: Organization, name: str) -> bool:
        response = self._request(
            org, "GET", f"/orgs/{org.login}/teams/{team_slug(name)}", "Check team name", allow_404=True
        )
        return response is not None

    def delete_repository(self, org: Organization, repo_id: int) -> None:
        full_name = self._repository_full_name(org, repo_id)
        if full_name is None:
            logger.info("Repository %s already gone from %s", repo_id, org.login)
            return
        self._request(org, "DELETE", f"/repos/{full_name}", "Delete repository", allow_404=True)
        logger.info("Deleted GitHub repository %s (%s)", full_name, repo_id)

    # ── OrganizationMembershipAPI ────────────────────────────────────

    def remove_organization_member(self, org: Organization, login: str) -> None:
        self._request(
            org, "DELETE", f"/orgs/{org.login}/members/{login}", "Remove organization member",
            allow_404=True,
        )
        logger.info("Removed %s from organization %s", login, org.login)


@lru_cache
def get_source_control() -> GitHubClient:
    """FastAPI dependency, one shared client per process."""
    return GitHubClient()
