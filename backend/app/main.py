"""FastAPI application entry point."""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Base, engine

# Import routers
from app.routers import groups, invitations

# Import all models so Base.metadata knows about them
from app.models.organization import Organization             # noqa: F401
from app.models.user import User                             # noqa: F401
from app.models.group import Grouping, Group                 # noqa: F401
from app.models.group_assignment import GroupAssignment, GroupAssignmentInvitation  # noqa: F401
from app.models.group_assignment_repo import GroupAssignmentRepo  # noqa: F401
from app.models.repo_access import RepoAccess                # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Classroom Group Assignments",
    description="Group-assignment invitations: join a group and get its GitHub team and repository",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(
    invitations.router, prefix="/api/group-assignment-invitations", tags=["GroupAssignmentInvitations"]
)
app.include_router(groups.router, prefix="/api/groups", tags=["Groups"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
