"""Tagged results returned by the redemption and reconciliation services.

Routers map these onto HTTP status codes; nothing in the service layer
raises past its boundary for an expected failure.
"""
import enum
from dataclasses import dataclass
from typing import Optional


class OutcomeStatus(str, enum.Enum):
    success = "success"
    denied = "denied"
    provisioning_error = "provisioning_error"
    not_found = "not_found"
    transient_error = "transient_error"
    not_provisioned = "not_provisioned"


class DenialReason(str, enum.Enum):
    wrong_grouping = "wrong_grouping"
    already_member = "already_member"
    group_full = "group_full"
    invalid_title = "invalid_title"
    title_taken = "title_taken"

    @property
    def error_class(self) -> str:
        """'capacity' for a full group, 'validation' for everything else."""
        return "capacity" if self is DenialReason.group_full else "validation"


@dataclass(frozen=True)
class RepoRef:
    """Identifies the provisioned remote team and repository of a group."""

    repo_id: str
    group_id: str
    github_team_id: int
    github_repo_id: int
    github_repo_name: str

    @classmethod
    def from_row(cls, row) -> "RepoRef":
        return cls(
            repo_id=row.repo_id,
            group_id=row.group_id,
            github_team_id=row.github_team_id,
            github_repo_id=row.github_repo_id,
            github_repo_name=row.github_repo_name,
        )


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls) -> "GateDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> "GateDecision":
        return cls(allowed=False, reason=reason)


@dataclass(frozen=True)
class Outcome:
    status: OutcomeStatus
    repo: Optional[RepoRef] = None
    reason: Optional[DenialReason] = None
    group_id: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.success

    @classmethod
    def success(cls, repo: RepoRef) -> "Outcome":
        return cls(status=OutcomeStatus.success, repo=repo, group_id=repo.group_id)

    @classmethod
    def denied(cls, reason: DenialReason, group_id: Optional[str] = None) -> "Outcome":
        return cls(status=OutcomeStatus.denied, reason=reason, group_id=group_id, message=reason.value)

    @classmethod
    def provisioning_error(cls, message: str, group_id: Optional[str] = None) -> "Outcome":
        return cls(status=OutcomeStatus.provisioning_error, group_id=group_id, message=message)

    @classmethod
    def not_found(cls, message: str) -> "Outcome":
        return cls(status=OutcomeStatus.not_found, message=message)

    @classmethod
    def transient_error(cls, message: str, group_id: Optional[str] = None) -> "Outcome":
        return cls(status=OutcomeStatus.transient_error, group_id=group_id, message=message)

    @classmethod
    def not_provisioned(cls, group_id: str) -> "Outcome":
        return cls(status=OutcomeStatus.not_provisioned, group_id=group_id)
