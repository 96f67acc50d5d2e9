"""Group-assignment invitation routes — redemption and confirmation.

The service layer returns tagged outcomes; this module only maps them onto
HTTP status codes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.group import Grouping
from app.models.group_assignment import GroupAssignment, GroupAssignmentInvitation
from app.models.user import User
from app.schemas.group import GroupSummaryOut, RepoRefOut
from app.schemas.invitation import AcceptInvitationIn, AcceptPageOut, InvitationOut, RedemptionOut
from app.services import lookups
from app.services.github_client import get_source_control
from app.services.invitation_redeemer import GroupSelector, redeem
from app.services.outcomes import DenialReason, Outcome, OutcomeStatus
from app.services.reconciliation import reconcile_or_provision
from app.services.source_control import SourceControlAPI

logger = logging.getLogger(__name__)
router = APIRouter()

_DENIAL_STATUS = {
    DenialReason.wrong_grouping: status.HTTP_400_BAD_REQUEST,
    DenialReason.invalid_title: status.HTTP_400_BAD_REQUEST,
    DenialReason.already_member: status.HTTP_409_CONFLICT,
    DenialReason.group_full: status.HTTP_409_CONFLICT,
    DenialReason.title_taken: status.HTTP_409_CONFLICT,
}

_OUTCOME_STATUS = {
    OutcomeStatus.not_found: status.HTTP_404_NOT_FOUND,
    OutcomeStatus.provisioning_error: status.HTTP_502_BAD_GATEWAY,
    OutcomeStatus.transient_error: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _raise_for_outcome(outcome: Outcome) -> None:
    if outcome.ok:
        return
    if outcome.status == OutcomeStatus.denied:
        code = _DENIAL_STATUS[outcome.reason]
    else:
        code = _OUTCOME_STATUS.get(outcome.status, status.HTTP_500_INTERNAL_SERVER_ERROR)
    raise HTTPException(
        status_code=code,
        detail={
            "status": outcome.status.value,
            "reason": outcome.reason.value if outcome.reason else None,
            "error_class": outcome.reason.error_class if outcome.reason else None,
            "message": outcome.message,
        },
    )


def _get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _get_invitation(db: Session, key: str) -> GroupAssignmentInvitation:
    invitation = lookups.find_invitation_by_key(db, key)
    if not invitation:
        raise HTTPException(status_code=404, detail="Invitation not found")
    return invitation


def _invitation_out(db: Session, invitation: GroupAssignmentInvitation) -> InvitationOut:
    assignment = db.get(GroupAssignment, invitation.group_assignment_id)
    grouping = db.get(Grouping, assignment.grouping_id)
    groups = lookups.groups_in_grouping(db, grouping.grouping_id)
    counts = lookups.member_counts(db, [g.group_id for g in groups])
    return InvitationOut(
        key=invitation.key,
        assignment_title=assignment.title,
        grouping_id=grouping.grouping_id,
        grouping_title=grouping.title,
        max_members=assignment.max_members,
        public_repo=assignment.public_repo,
        groups=[
            GroupSummaryOut(group_id=g.group_id, title=g.title, member_count=counts[g.group_id])
            for g in groups
        ],
    )


def _redemption_out(outcome: Outcome) -> RedemptionOut:
    return RedemptionOut(
        status=outcome.status.value,
        group_id=outcome.group_id,
        repo=RepoRefOut.model_validate(outcome.repo) if outcome.repo else None,
    )


@router.get("/{key}", response_model=InvitationOut)
def show_invitation(key: str, db: Session = Depends(get_db)):
    """Invitation summary with the groups a student can choose from."""
    return _invitation_out(db, _get_invitation(db, key))


@router.get("/{key}/accept", response_model=AcceptPageOut)
def accept_page(key: str, user_id: str = Query(...), db: Session = Depends(get_db)):
    """Data for the accept view; includes the user's group if they already joined one."""
    user = _get_user(db, user_id)
    invitation_out = _invitation_out(db, _get_invitation(db, key))
    current = lookups.group_of_user_in_grouping(db, user.user_id, invitation_out.grouping_id)
    current_out = None
    if current is not None:
        current_out = next(g for g in invitation_out.groups if g.group_id == current.group_id)
    return AcceptPageOut(invitation=invitation_out, current_group=current_out)


@router.patch("/{key}/accept", response_model=RedemptionOut)
def accept_invitation(
    key: str,
    payload: AcceptInvitationIn,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    source_control: SourceControlAPI = Depends(get_source_control),
):
    """Join (or create) a group and provision its repository."""
    user = _get_user(db, user_id)
    if payload.group.id is not None:
        selector = GroupSelector.existing(payload.group.id)
    else:
        selector = GroupSelector.create_new(payload.group.title)

    outcome = redeem(db, source_control, key, user, selector)
    _raise_for_outcome(outcome)
    return _redemption_out(outcome)


@router.get("/{key}/success", response_model=RedemptionOut)
def successful_invitation(
    key: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    source_control: SourceControlAPI = Depends(get_source_control),
):
    """Confirmation view.

    Verifies the repository of every group the user belongs to in the
    assignment's grouping and responds with the first group they joined.
    """
    user = _get_user(db, user_id)
    invitation = _get_invitation(db, key)
    assignment = db.get(GroupAssignment, invitation.group_assignment_id)
    groups = lookups.groups_of_user_in_grouping(db, user.user_id, assignment.grouping_id)
    if not groups:
        raise HTTPException(status_code=404, detail="User has not joined a group for this assignment")

    outcomes = [reconcile_or_provision(db, source_control, group, assignment) for group in groups]
    for outcome in outcomes:
        _raise_for_outcome(outcome)
    return _redemption_out(outcomes[0])
