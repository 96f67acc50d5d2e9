"""Pytest fixtures — SQLite database and an in-memory GitHub for fast, isolated tests."""
import os

SQLITE_URL = "sqlite:///./test.db"
os.environ.setdefault("DATABASE_URL", SQLITE_URL)

from dataclasses import dataclass  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.services.github_client import get_source_control  # noqa: E402

# Import all models so they register with Base.metadata
from app.models.organization import Organization  # noqa: E402
from app.models.user import User  # noqa: E402
from app.models.group import Grouping, Group  # noqa: E402
from app.models.group_assignment import GroupAssignment, GroupAssignmentInvitation  # noqa: E402
from app.models.group_assignment_repo import GroupAssignmentRepo  # noqa: E402, F401
from app.models.repo_access import RepoAccess  # noqa: E402

from tests.fakes import FakeSourceControl  # noqa: E402


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def source_control():
    return FakeSourceControl()


@pytest.fixture(scope="function")
def client(session_factory, source_control):
    """FastAPI TestClient with the database and GitHub dependencies overridden."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_source_control] = lambda: source_control
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: seed classroom data directly through the session
# ---------------------------------------------------------------------------
@dataclass
class Classroom:
    organization: Organization
    grouping: Grouping
    assignment: GroupAssignment
    invitation: GroupAssignmentInvitation


def seed_classroom(db, max_members: Optional[int] = None, public_repo: bool = True) -> Classroom:
    """Organization, grouping, 'HTML5' group assignment and its invitation."""
    org = Organization(github_id=4223, login="classroom-testing-org", title="Classroom Testing", github_token="t0k3n")
    db.add(org)
    db.flush()
    grouping = Grouping(title="Grouping 1", organization_id=org.organization_id)
    db.add(grouping)
    db.flush()
    assignment = GroupAssignment(
        title="HTML5",
        slug="html5",
        organization_id=org.organization_id,
        grouping_id=grouping.grouping_id,
        max_members=max_members,
        public_repo=public_repo,
    )
    db.add(assignment)
    db.flush()
    invitation = GroupAssignmentInvitation(group_assignment_id=assignment.group_assignment_id)
    db.add(invitation)
    db.commit()
    return Classroom(org, grouping, assignment, invitation)


def create_user(db, login: str) -> User:
    user = User(login=login)
    db.add(user)
    db.commit()
    return user


def create_group(db, grouping: Grouping, title: str = "The Group") -> Group:
    group = Group(title=title, grouping_id=grouping.grouping_id)
    db.add(group)
    db.commit()
    return group


def add_member(db, group: Group, user: User, org: Organization) -> RepoAccess:
    access = RepoAccess(user_id=user.user_id, organization_id=org.organization_id, group_id=group.group_id)
    db.add(access)
    db.commit()
    return access


@pytest.fixture(scope="function")
def classroom(db) -> Classroom:
    return seed_classroom(db)


@pytest.fixture(scope="function")
def student(db) -> User:
    return create_user(db, "student-one")
