"""Explicit removal of a user from a group.

Deletes the RepoAccess row, then revokes the remote grants it stood for:
the group's team membership and, once the user has no access left in the
organization, the organization membership itself. Remote failures are
logged and do not restore the local row.
"""
import logging

from sqlalchemy.orm import Session

from app.errors import SourceControlError
from app.models.group import Group, Grouping
from app.models.organization import Organization
from app.models.repo_access import RepoAccess
from app.models.user import User
from app.services import lookups
from app.services.group_lock import group_lock
from app.services.source_control import OrganizationMembershipAPI, SourceControlAPI

logger = logging.getLogger(__name__)


def remove_member(
    db: Session,
    source_control: SourceControlAPI,
    membership_api: OrganizationMembershipAPI,
    group: Group,
    user: User,
) -> bool:
    """Returns False when the user was not a member of the group."""
    group_id, user_id, login = group.group_id, user.user_id, user.login
    team_id = group.github_team_id

    with group_lock(db, group_id):
        access = (
            db.query(RepoAccess)
            .filter(RepoAccess.group_id == group_id, RepoAccess.user_id == user_id)
            .first()
        )
        if access is None:
            db.rollback()
            return False
        db.delete(access)
        db.commit()
    logger.info("Removed user %s from group %s", user_id, group_id)

    grouping = db.get(Grouping, group.grouping_id)
    org = db.get(Organization, grouping.organization_id)

    if team_id is not None:
        try:
            source_control.remove_team_membership(org, team_id, login)
        except SourceControlError as exc:
            logger.warning("Could not remove %s from team %s: %s", login, team_id, exc)

    if not lookups.user_has_access_in_organization(db, user_id, org.organization_id):
        try:
            membership_api.remove_organization_member(org, login)
        except SourceControlError as exc:
            logger.warning("Could not remove %s from organization %s: %s", login, org.login, exc)

    return True
