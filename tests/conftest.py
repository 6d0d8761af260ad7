"""
Shared pytest fixtures for the compliance ledger test suite.

Provides:
    - engine / db: in-memory SQLite with every table, recreated per test
    - repos: repository bundle over the test session
    - clock: controllable clock (starts 2024-11-15 12:00 UTC)
    - participant / admin: pre-created profiles
    - client: FastAPI TestClient wired to the test session and clock
    - auth_headers: bearer headers for a participant
"""
import os
import tempfile
from datetime import datetime, timedelta

# Settings are read at import time; configure them before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUDIT_LOG_DIR", tempfile.mkdtemp(prefix="sap-audit-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.clock import get_clock
from app.core.security import create_access_token
from app.db.base import get_db
from app.main import app as fastapi_app
from app.models import Base
from app.models.participant import Participant, ParticipantRole, ParticipantStatus
from app.repositories import Repositories


class FixedClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ── DB fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture()
def repos(db):
    return Repositories.from_session(db)


@pytest.fixture()
def clock():
    return FixedClock(datetime(2024, 11, 15, 12, 0))


# ── Entity fixtures ──────────────────────────────────────────────────────


def _make_participant(db, participant_id, email, role=ParticipantRole.PARTICIPANT, name=None):
    participant = Participant(
        id=participant_id,
        email=email,
        preferred_name=name or email.split("@")[0],
        role=role,
        status=ParticipantStatus.ACTIVE,
    )
    db.add(participant)
    db.commit()
    return participant


@pytest.fixture()
def participant(db):
    return _make_participant(db, "user-sarah", "sarah@example.com", name="Sarah")


@pytest.fixture()
def admin(db):
    return _make_participant(db, "user-admin", "admin@example.com", role=ParticipantRole.ADMIN, name="Admin")


# ── API fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def client(db, clock):
    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


def _auth_headers(participant_id, email=None):
    claims = {"sub": participant_id}
    if email:
        claims["email"] = email
    token = create_access_token(claims)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers():
    """Factory: bearer headers for a participant id."""
    return _auth_headers


@pytest.fixture()
def make_participant(db):
    """Factory: create and commit another participant."""
    def factory(participant_id, email, role=ParticipantRole.PARTICIPANT, name=None):
        return _make_participant(db, participant_id, email, role=role, name=name)
    return factory
