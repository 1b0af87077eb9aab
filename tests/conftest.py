import os

# must be set before app.main is imported: skips Firebase init and enables mock tokens
os.environ["ENV"] = "test"

import uuid
from datetime import datetime, timedelta, UTC

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db import Base, get_db
from app.models.event import Event
from app.models.participant import Participant, ParticipantStatus
from app.models.school_class import SchoolClass
from app.models.user import User, UserRole

# Use SQLite in-memory for test DB
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
# For in-memory SQLite we must use a StaticPool so multiple connections share the
# same in-memory database during the test run (TestClient requests vs test setup).
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency override
def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_test_db():
    # recreate schema for each test to ensure isolation
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer mock-admin-token"}


@pytest.fixture
def user_headers():
    """Headers for a regular signed-in user; ``user_headers('bob')`` for someone else."""
    def _make(name: str = "alice"):
        return {"Authorization": f"Bearer mock-user-{name}"}
    return _make


@pytest.fixture
def school_class(db_session):
    c = SchoolClass(name="5a")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def active_event(db_session):
    now = datetime.now(UTC).replace(tzinfo=None)
    event = Event(
        name="Wichtelaktion Test",
        description="Test round",
        registration_deadline=now + timedelta(days=30),
        assignment_date=now + timedelta(days=35),
        gift_deadline=now + timedelta(days=60),
        delivery_date=now + timedelta(days=65),
        is_active=True,
        is_registration_open=True,
        are_assignments_created=False,
    )
    db_session.add(event)
    db_session.commit()
    return event


@pytest.fixture
def make_user(db_session):
    def _make(name: str, role: UserRole = UserRole.user) -> User:
        user = User(
            external_id=f"ext-{name}-{uuid.uuid4().hex[:6]}",
            email=f"{name}+{uuid.uuid4().hex[:6]}@example.com",
            first_name=name.title(),
            last_name="Test",
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def make_participants(db_session, make_user, school_class):
    """Register ``count`` fresh users for ``event`` directly in the database."""
    def _make(event: Event, count: int) -> list[Participant]:
        participants = []
        for i in range(count):
            user = make_user(f"kid{i}")
            p = Participant(
                user_id=user.id,
                event_id=event.id,
                class_id=school_class.id,
                interests=f"likes number {i}",
                status=ParticipantStatus.REGISTERED,
            )
            db_session.add(p)
            participants.append(p)
        db_session.commit()
        return participants
    return _make
