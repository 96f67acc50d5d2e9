"""GroupAssignmentRepo ORM model — one provisioning outcome for a group.

Rows are retired (``active = False``) when reconciliation finds the remote
repository gone, never deleted. At most one row per (group, assignment) is
active; the partial unique index enforces it on PostgreSQL and SQLite.
"""
import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.sql import func
from app.database import Base


class GroupAssignmentRepo(Base):
    __tablename__ = "group_assignment_repos"
    __table_args__ = (
        Index(
            "uq_group_assignment_repos_active",
            "group_id",
            "group_assignment_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active"),
        ),
    )

    repo_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    group_assignment_id = Column(
        String(36), ForeignKey("group_assignments.group_assignment_id"), nullable=False
    )
    group_id = Column(String(36), ForeignKey("groups.group_id"), nullable=False)
    github_team_id = Column(BigInteger, nullable=False)
    github_repo_id = Column(BigInteger, nullable=False)
    github_repo_name = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    retired_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
