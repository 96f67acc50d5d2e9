"""Grouping and Group ORM models."""
import uuid
from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base


class Grouping(Base):
    __tablename__ = "groupings"

    grouping_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(150), nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.organization_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Group(Base):
    __tablename__ = "groups"
    __table_args__ = (UniqueConstraint("grouping_id", "title", name="uq_groups_grouping_title"),)

    group_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(150), nullable=False)
    grouping_id = Column(String(36), ForeignKey("groupings.grouping_id"), nullable=False)
    github_team_id = Column(BigInteger, nullable=True)  # set on first provisioning, then reused
    created_at = Column(DateTime(timezone=True), server_default=func.now())
