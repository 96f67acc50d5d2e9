"""Explicit persistence queries used by the redemption services.

Membership and provisioning state are always fetched through these
functions rather than through ORM relationship traversal.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.group import Group
from app.models.group_assignment import GroupAssignmentInvitation
from app.models.group_assignment_repo import GroupAssignmentRepo
from app.models.repo_access import RepoAccess


def find_invitation_by_key(db: Session, key: str) -> Optional[GroupAssignmentInvitation]:
    return db.query(GroupAssignmentInvitation).filter(GroupAssignmentInvitation.key == key).first()


def member_ids(db: Session, group_id: str) -> set[str]:
    """Members of group: distinct user ids holding a RepoAccess in it."""
    rows = db.query(RepoAccess.user_id).filter(RepoAccess.group_id == group_id).distinct().all()
    return {user_id for (user_id,) in rows}


def members_of_group(db: Session, group_id: str) -> list[RepoAccess]:
    return (
        db.query(RepoAccess)
        .filter(RepoAccess.group_id == group_id)
        .order_by(RepoAccess.created_at)
        .all()
    )


def member_counts(db: Session, group_ids: list[str]) -> dict[str, int]:
    if not group_ids:
        return {}
    rows = (
        db.query(RepoAccess.group_id, func.count(func.distinct(RepoAccess.user_id)))
        .filter(RepoAccess.group_id.in_(group_ids))
        .group_by(RepoAccess.group_id)
        .all()
    )
    counts = {gid: 0 for gid in group_ids}
    counts.update({gid: count for gid, count in rows})
    return counts


def active_repo_for(
    db: Session, group_id: str, group_assignment_id: Optional[str] = None
) -> Optional[GroupAssignmentRepo]:
    """The active GroupAssignmentRepo of a group, newest first if unscoped."""
    query = db.query(GroupAssignmentRepo).filter(
        GroupAssignmentRepo.group_id == group_id,
        GroupAssignmentRepo.active.is_(True),
    )
    if group_assignment_id:
        query = query.filter(GroupAssignmentRepo.group_assignment_id == group_assignment_id)
    return query.order_by(GroupAssignmentRepo.created_at.desc()).first()


def groups_in_grouping(db: Session, grouping_id: str) -> list[Group]:
    return db.query(Group).filter(Group.grouping_id == grouping_id).order_by(Group.title).all()


def find_group_by_title(db: Session, grouping_id: str, title: str) -> Optional[Group]:
    return db.query(Group).filter(Group.grouping_id == grouping_id, Group.title == title).first()


def groups_of_user_in_grouping(db: Session, user_id: str, grouping_id: str) -> list[Group]:
    """The user's groups in the grouping, in the order they joined."""
    return (
        db.query(Group)
        .join(RepoAccess, RepoAccess.group_id == Group.group_id)
        .filter(RepoAccess.user_id == user_id, Group.grouping_id == grouping_id)
        .order_by(RepoAccess.created_at, RepoAccess.repo_access_id)
        .all()
    )


def group_of_user_in_grouping(db: Session, user_id: str, grouping_id: str) -> Optional[Group]:
    groups = groups_of_user_in_grouping(db, user_id, grouping_id)
    return groups[0] if groups else None


def user_has_access_in_organization(db: Session, user_id: str, organization_id: str) -> bool:
    return (
        db.query(RepoAccess)
        .filter(RepoAccess.user_id == user_id, RepoAccess.organization_id == organization_id)
        .first()
        is not None
    )
