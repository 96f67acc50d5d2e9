"""Pydantic schemas for group-assignment invitations."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, model_validator

from app.schemas.group import GroupSummaryOut, RepoRefOut


class GroupSelectorIn(BaseModel):
    """Join an existing group by id, or create one with the given title."""

    id: Optional[str] = None
    title: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "GroupSelectorIn":
        if (self.id is None) == (self.title is None):
            raise ValueError("Provide either a group id or a new group title")
        return self


class AcceptInvitationIn(BaseModel):
    group: GroupSelectorIn


class InvitationOut(BaseModel):
    key: str
    assignment_title: str
    grouping_id: str
    grouping_title: str
    max_members: Optional[int] = None
    public_repo: bool
    groups: list[GroupSummaryOut] = []


class AcceptPageOut(BaseModel):
    invitation: InvitationOut
    current_group: Optional[GroupSummaryOut] = None


class RedemptionOut(BaseModel):
    status: str
    group_id: Optional[str] = None
    repo: Optional[RepoRefOut] = None
