"""Provision exactly one live remote team + repository per group.

``ensure_repo_for`` is idempotent: an active GroupAssignmentRepo row is
trusted as known-good and returned without any remote call. Otherwise it
picks a free repository name, creates the team (once per group, under a
free team name since GitHub team names are unique per organization), the
repository and the team grant, then adds the new active row. The row is
only flushed; the caller owns the transaction and the group lock.
"""
import logging
import re
import unicodedata
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ProvisioningError, SourceControlError
from app.models.group import Group
from app.models.group_assignment import GroupAssignment
from app.models.group_assignment_repo import GroupAssignmentRepo
from app.models.organization import Organization
from app.services import lookups
from app.services.outcomes import RepoRef
from app.services.source_control import SourceControlAPI

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9_]+")


def slugify(value: str) -> str:
    """Lowercase, ASCII-only, runs of other characters collapsed to '-'."""
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG_CHARS.sub("-", ascii_value.lower()).strip("-")


def repo_name_for(assignment: GroupAssignment, group: Group) -> str:
    parts = [slugify(assignment.slug), slugify(group.title)]
    return "-".join(part for part in parts if part)


def _resolve_name(
    taken: Callable[[Organization, str], bool], kind: str, org: Organization, desired: str, suffix_limit: int
) -> str:
    """First of ``desired``, ``desired-1`` .. ``desired-<limit>`` that ``taken`` reports free."""
    for attempt in range(suffix_limit + 1):
        candidate = desired if attempt == 0 else f"{desired}-{attempt}"
        if not taken(org, candidate):
            return candidate
        logger.info("%s name %s/%s is taken", kind.capitalize(), org.login, candidate)
    raise ProvisioningError(
        f"No free {kind} name for '{desired}' after {suffix_limit} suffixes",
        details={"organization": org.login, "desired_name": desired},
    )


def retire(row: GroupAssignmentRepo) -> None:
    row.active = False
    row.retired_at = datetime.now(timezone.utc)


def ensure_repo_for(
    db: Session,
    source_control: SourceControlAPI,
    group: Group,
    assignment: GroupAssignment,
    suffix_limit: Optional[int] = None,
) -> RepoRef:
    """Return the group's live repository, provisioning it if needed.

    Raises ProvisioningError on any remote failure or when every candidate
    name is taken; nothing is added to the session in that case.
    """
    existing = lookups.active_repo_for(db, group.group_id, assignment.group_assignment_id)
    if existing is not None:
        return RepoRef.from_row(existing)

    org = db.get(Organization, assignment.organization_id)
    limit = settings.REPO_NAME_SUFFIX_LIMIT if suffix_limit is None else suffix_limit
    created: dict[str, int] = {}
    try:
        name = _resolve_name(
            source_control.repository_name_taken, "repository", org, repo_name_for(assignment, group), limit
        )

        team_id = group.github_team_id
        if team_id is None:
            team_name = _resolve_name(source_control.team_name_taken, "team", org, group.title, limit)
            team_id = source_control.create_team(org, team_name)
            created["team"] = team_id

        repo_id = source_control.create_repository(org, name, private=not assignment.public_repo)
        created["repository"] = repo_id

        source_control.add_team_to_repository(org, team_id, repo_id, settings.TEAM_REPO_PERMISSION)
    except SourceControlError as exc:
        if created:
            logger.warning(
                "Provisioning for group %s aborted; remote resources left for manual cleanup: %s",
                group.group_id, created,
            )
        raise ProvisioningError(
            f"Could not provision a repository for group '{group.title}': {exc.message}",
            details={"group_id": group.group_id, "status_code": exc.status_code},
        ) from exc

    group.github_team_id = team_id
    row = GroupAssignmentRepo(
        group_assignment_id=assignment.group_assignment_id,
        group_id=group.group_id,
        github_team_id=team_id,
        github_repo_id=repo_id,
        github_repo_name=name,
        active=True,
    )
    db.add(row)
    db.flush()
    logger.info(
        "Provisioned %s/%s (repo %s, team %s) for group %s",
        org.login, name, repo_id, team_id, group.group_id,
    )
    return RepoRef.from_row(row)


def destroy_repo(db: Session, source_control: SourceControlAPI, row: GroupAssignmentRepo) -> None:
    """Delete the remote repository and retire its record.

    SourceControlError propagates and leaves the record untouched.
    """
    assignment = db.get(GroupAssignment, row.group_assignment_id)
    org = db.get(Organization, assignment.organization_id)
    source_control.delete_repository(org, row.github_repo_id)
    retire(row)
    db.commit()
    logger.info("Deleted repository %s and retired record %s", row.github_repo_id, row.repo_id)
