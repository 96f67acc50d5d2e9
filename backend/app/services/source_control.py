"""Ports for the remote source-control host.

Production code depends on these protocols; ``GitHubClient`` implements
both, tests substitute an in-memory fake. Every method raises
``SourceControlError`` when the remote call fails.
"""
from typing import Protocol

from app.models.organization import Organization


class SourceControlAPI(Protocol):
    def create_team(self, org: Organization, name: str) -> int: ...

    def create_repository(self, org: Organization, name: str, private: bool) -> int: ...

    def add_team_to_repository(
        self, org: Organization, team_id: int, repo_id: int, permission: str
    ) -> None: ...

    def add_team_membership(self, org: Organization, team_id: int, login: str) -> None: ...

    def remove_team_membership(self, org: Organization, team_id: int, login: str) -> None: ...

    def repository_exists(self, org: Organization, repo_id: int) -> bool: ...

    def repository_name_taken(self, org: Organization, name: str) -> bool: ...

    def team_name_taken(self, org: Organization, name: str) -> bool: ...

    def delete_repository(self, org: Organization, repo_id: int) -> None: ...


class OrganizationMembershipAPI(Protocol):
    def remove_organization_member(self, org: Organization, login: str) -> None: ...
