"""RepoAccess ORM model — a user's membership in a group."""
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base


class RepoAccess(Base):
    __tablename__ = "repo_accesses"
    __table_args__ = (UniqueConstraint("user_id", "group_id", name="uq_repo_accesses_user_group"),)

    repo_access_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.organization_id"), nullable=False)
    group_id = Column(String(36), ForeignKey("groups.group_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
