"""Pydantic schemas for Groups."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class RepoRefOut(BaseModel):
    repo_id: str
    github_team_id: int
    github_repo_id: int
    github_repo_name: str

    model_config = {"from_attributes": True}


class GroupSummaryOut(BaseModel):
    group_id: str
    title: str
    member_count: int = 0


class GroupMemberOut(BaseModel):
    user_id: str
    login: str
    joined_at: Optional[datetime] = None


class GroupOut(BaseModel):
    group_id: str
    title: str
    grouping_id: str
    github_team_id: Optional[int] = None
    created_at: Optional[datetime] = None
    members: list[GroupMemberOut] = []
    repo: Optional[RepoRefOut] = None
