"""Redeem a group-assignment invitation for one user.

Flow: resolve the invitation, resolve or stage the target group, then under
the group lock run the membership gate, ensure the group's repository,
grant the user access to the group's team and record the RepoAccess. Any
denial or failure rolls the whole transaction back, so a failed redemption
leaves no group, repository record or membership behind.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ProvisioningError, SourceControlError
from app.models.group import Group
from app.models.group_assignment import GroupAssignment
from app.models.organization import Organization
from app.models.repo_access import RepoAccess
from app.models.user import User
from app.services import lookups
from app.services.group_lock import group_lock
from app.services.membership_gate import can_join
from app.services.outcomes import DenialReason, Outcome
from app.services.repo_provisioner import ensure_repo_for
from app.services.source_control import SourceControlAPI

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupSelector:
    """Either an existing group id or the title of a group to create."""

    group_id: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def existing(cls, group_id: str) -> "GroupSelector":
        return cls(group_id=group_id)

    @classmethod
    def create_new(cls, title: str) -> "GroupSelector":
        return cls(title=title)


def _stage_new_group(db: Session, assignment: GroupAssignment, title: Optional[str]):
    """Add a new empty group to the session. Returns (group, denial)."""
    title = (title or "").strip()
    if not title:
        return None, DenialReason.invalid_title
    if lookups.find_group_by_title(db, assignment.grouping_id, title) is not None:
        return None, DenialReason.title_taken

    group = Group(title=title, grouping_id=assignment.grouping_id)
    db.add(group)
    try:
        db.flush()
    except IntegrityError:
        # A concurrent redemption created the same title first
        db.rollback()
        return None, DenialReason.title_taken
    logger.info("Staged new group '%s' (%s) in grouping %s", title, group.group_id, assignment.grouping_id)
    return group, None


def redeem(
    db: Session,
    source_control: SourceControlAPI,
    invitation_key: str,
    user: User,
    selector: GroupSelector,
) -> Outcome:
    user_id = user.user_id
    login = user.login

    invitation = lookups.find_invitation_by_key(db, invitation_key)
    if invitation is None:
        return Outcome.not_found("Invitation not found")
    assignment = db.get(GroupAssignment, invitation.group_assignment_id)

    if selector.group_id is not None:
        group = db.get(Group, selector.group_id)
        if group is None:
            return Outcome.not_found("Group not found")
    else:
        group, denial = _stage_new_group(db, assignment, selector.title)
        if denial is not None:
            logger.warning("User %s cannot create group '%s': %s", user_id, selector.title, denial.value)
            return Outcome.denied(denial)

    group_id = group.group_id
    with group_lock(db, group_id):
        decision = can_join(user_id, group, assignment, lookups.member_ids(db, group_id))
        if not decision.allowed:
            db.rollback()
            logger.warning("User %s denied joining group %s: %s", user_id, group_id, decision.reason.value)
            return Outcome.denied(decision.reason, group_id)

        org = db.get(Organization, assignment.organization_id)
        try:
            repo = ensure_repo_for(db, source_control, group, assignment)
            source_control.add_team_membership(org, repo.github_team_id, login)
        except ProvisioningError as exc:
            db.rollback()
            logger.warning("Redemption by %s for group %s failed: %s", user_id, group_id, exc)
            return Outcome.provisioning_error(exc.message, group_id)
        except SourceControlError as exc:
            db.rollback()
            logger.warning("Adding %s to the team of group %s failed: %s", login, group_id, exc)
            return Outcome.provisioning_error(exc.message, group_id)

        db.add(RepoAccess(user_id=user_id, organization_id=org.organization_id, group_id=group_id))
        db.commit()

    logger.info("User %s joined group %s (repo %s)", user_id, group_id, repo.github_repo_name)
    return Outcome.success(repo)
