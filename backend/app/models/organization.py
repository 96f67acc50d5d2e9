"""Organization ORM model — the GitHub organization repos are provisioned in."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.sql import func
from app.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    organization_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    github_id = Column(Integer, nullable=False, unique=True)
    login = Column(String(100), nullable=False)
    title = Column(String(150), nullable=False)
    github_token = Column(String(255), nullable=False, default="")  # credential for API calls
    created_at = Column(DateTime(timezone=True), server_default=func.now())
