"""Group API routes — inspection and explicit membership/repo removal."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import SourceControlError
from app.models.group import Group
from app.models.group_assignment_repo import GroupAssignmentRepo
from app.models.user import User
from app.schemas.group import GroupMemberOut, GroupOut, RepoRefOut
from app.services import lookups
from app.services.github_client import get_source_control
from app.services.membership_service import remove_member as remove_group_member
from app.services.repo_provisioner import destroy_repo
from app.services.source_control import SourceControlAPI

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_group(db: Session, group_id: str) -> Group:
    group = db.get(Group, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


@router.get("/{group_id}", response_model=GroupOut)
def get_group(group_id: str, db: Session = Depends(get_db)):
    """Fetch a single group with its members and active repository."""
    group = _get_group(db, group_id)
    members = []
    for access in lookups.members_of_group(db, group_id):
        user = db.get(User, access.user_id)
        members.append(GroupMemberOut(user_id=user.user_id, login=user.login, joined_at=access.created_at))
    row = lookups.active_repo_for(db, group_id)
    return GroupOut(
        group_id=group.group_id,
        title=group.title,
        grouping_id=group.grouping_id,
        github_team_id=group.github_team_id,
        created_at=group.created_at,
        members=members,
        repo=RepoRefOut.model_validate(row) if row else None,
    )


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    group_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    source_control: SourceControlAPI = Depends(get_source_control),
):
    """Remove a member from a group and revoke their remote access."""
    group = _get_group(db, group_id)
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not remove_group_member(db, source_control, source_control, group, user):
        raise HTTPException(status_code=404, detail="Membership not found")


@router.delete("/{group_id}/repos/{repo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_repo(
    group_id: str,
    repo_id: str,
    db: Session = Depends(get_db),
    source_control: SourceControlAPI = Depends(get_source_control),
):
    """Delete the group's remote repository and retire its record."""
    row = (
        db.query(GroupAssignmentRepo)
        .filter(GroupAssignmentRepo.repo_id == repo_id, GroupAssignmentRepo.group_id == group_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Repository record not found")
    if not row.active:
        raise HTTPException(status_code=400, detail="Repository record is already retired")
    try:
        destroy_repo(db, source_control, row)
    except SourceControlError as exc:
        logger.warning("Deleting repository %s failed: %s", row.github_repo_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
