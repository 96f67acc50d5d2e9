"""GroupAssignment and GroupAssignmentInvitation ORM models."""
import secrets
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class GroupAssignment(Base):
    __tablename__ = "group_assignments"

    group_assignment_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(150), nullable=False)
    slug = Column(String(150), nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.organization_id"), nullable=False)
    grouping_id = Column(String(36), ForeignKey("groupings.grouping_id"), nullable=False)
    max_members = Column(Integer, nullable=True)  # NULL = unlimited
    public_repo = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class GroupAssignmentInvitation(Base):
    __tablename__ = "group_assignment_invitations"

    invitation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = Column(String(64), nullable=False, unique=True, default=lambda: secrets.token_hex(16))
    group_assignment_id = Column(
        String(36), ForeignKey("group_assignments.group_assignment_id"), nullable=False, unique=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
