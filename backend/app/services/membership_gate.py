"""Decide whether a user may join a group.

Pure over the snapshot it is given; the caller fetches ``member_ids``
inside the group lock so the capacity check and the insert that follows
see the same state.
"""
from app.models.group import Group
from app.models.group_assignment import GroupAssignment
from app.services.outcomes import DenialReason, GateDecision


def can_join(user_id: str, group: Group, assignment: GroupAssignment, member_ids: set[str]) -> GateDecision:
    """Checks run in order and the first failure is reported."""
    if group.grouping_id != assignment.grouping_id:
        return GateDecision.deny(DenialReason.wrong_grouping)

    if user_id in member_ids:
        return GateDecision.deny(DenialReason.already_member)

    if assignment.max_members is not None and len(member_ids) >= assignment.max_members:
        return GateDecision.deny(DenialReason.group_full)

    return GateDecision.allow()
