"""Repair drift between provisioning records and GitHub.

Run when a user revisits the post-acceptance confirmation view. A live
repository is a no-op; a repository confirmed deleted is retired and
replaced; an inconclusive existence check changes nothing.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.errors import ProvisioningError, SourceControlError, TransientReconciliationError
from app.models.group import Group
from app.models.group_assignment import GroupAssignment
from app.models.group_assignment_repo import GroupAssignmentRepo
from app.models.organization import Organization
from app.services import lookups
from app.services.group_lock import group_lock
from app.services.outcomes import Outcome, OutcomeStatus, RepoRef
from app.services.repo_provisioner import ensure_repo_for, retire
from app.services.source_control import SourceControlAPI

logger = logging.getLogger(__name__)


def _repository_is_live(
    source_control: SourceControlAPI, org: Organization, row: GroupAssignmentRepo
) -> bool:
    try:
        return source_control.repository_exists(org, row.github_repo_id)
    except SourceControlError as exc:
        raise TransientReconciliationError(
            f"Could not verify repository {row.github_repo_name}: {exc.message}",
            details={"repo_id": row.repo_id, "status_code": exc.status_code},
        ) from exc


def reconcile(
    db: Session,
    source_control: SourceControlAPI,
    group: Group,
    assignment: Optional[GroupAssignment] = None,
) -> Outcome:
    """Verify the group's active repository, re-provisioning it if deleted.

    Without ``assignment`` the newest active record of the group is checked.
    Returns NotProvisioned when the group has no active record.
    """
    group_id = group.group_id
    with group_lock(db, group_id):
        row = lookups.active_repo_for(
            db, group_id, assignment.group_assignment_id if assignment is not None else None
        )
        if row is None:
            db.rollback()
            return Outcome.not_provisioned(group_id)

        if assignment is None:
            assignment = db.get(GroupAssignment, row.group_assignment_id)
        org = db.get(Organization, assignment.organization_id)

        try:
            live = _repository_is_live(source_control, org, row)
        except TransientReconciliationError as exc:
            db.rollback()
            logger.warning("Reconciliation of group %s skipped: %s", group_id, exc)
            return Outcome.transient_error(exc.message, group_id)

        if live:
            ref = RepoRef.from_row(row)
            db.rollback()
            return Outcome.success(ref)

        logger.info(
            "Repository %s (%s) of group %s is gone; retiring record %s",
            row.github_repo_name, row.github_repo_id, group_id, row.repo_id,
        )
        retire(row)
        db.flush()
        try:
            ref = ensure_repo_for(db, source_control, group, assignment)
        except ProvisioningError as exc:
            # Rolling back keeps the old record active so the next view retries
            db.rollback()
            logger.warning("Re-provisioning for group %s failed: %s", group_id, exc)
            return Outcome.provisioning_error(exc.message, group_id)
        db.commit()

    logger.info("Group %s re-provisioned as %s", group_id, ref.github_repo_name)
    return Outcome.success(ref)


def reconcile_or_provision(
    db: Session,
    source_control: SourceControlAPI,
    group: Group,
    assignment: GroupAssignment,
) -> Outcome:
    """Entry point for the confirmation view."""
    outcome = reconcile(db, source_control, group, assignment)
    if outcome.status != OutcomeStatus.not_provisioned:
        return outcome

    group_id = group.group_id
    with group_lock(db, group_id):
        try:
            ref = ensure_repo_for(db, source_control, group, assignment)
        except ProvisioningError as exc:
            db.rollback()
            logger.warning("Provisioning for group %s failed: %s", group_id, exc)
            return Outcome.provisioning_error(exc.message, group_id)
        db.commit()
    return Outcome.success(ref)
