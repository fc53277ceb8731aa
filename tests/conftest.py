# tests/conftest.py

import os
import shutil
import tempfile

# Settings are read at import time, so the environment goes first
_TEST_ROOT = tempfile.mkdtemp(prefix="campus-events-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT}/app.db"
os.environ["MEDIA_ROOT"] = os.path.join(_TEST_ROOT, "media")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["EVENT_AUTO_APPROVE"] = "true"

from datetime import date, timedelta
from itertools import count

import pytest
from sqlalchemy.orm import sessionmaker
from starlette.testclient import TestClient

from api.main import app
from config import settings
from database.database import get_db, init_db, make_engine
from database.models import Event, EventStatus, Profile, UserRole
from services.auth_service import hash_password

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)

_ids = count(1)


@pytest.fixture(scope="function")
def engine(tmp_path):
    """A fresh SQLite file database per test"""
    test_engine = make_engine(f"sqlite:///{tmp_path}/test.db")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function", autouse=True)
def clean_bucket():
    shutil.rmtree(settings.bucket_path, ignore_errors=True)
    yield
    shutil.rmtree(settings.bucket_path, ignore_errors=True)


@pytest.fixture(scope="function")
def client(session_factory):
    """TestClient bound to the per-test database"""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# --- Factories ---

def make_profile(db, role: UserRole, full_name: str = None, email: str = None) -> Profile:
    n = next(_ids)
    profile = Profile(
        email=email or f"{role.value}{n}@campus.edu",
        full_name=full_name or f"{role.value.title()} {n}",
        role=role,
        password_hash=PASSWORD_HASH,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def make_event(db, organizer: Profile, **overrides) -> Event:
    fields = dict(
        title="Hack Night",
        description="Build something in one evening",
        venue="Engineering Hall",
        category="Technology",
        capacity=10,
        event_date=date.today() + timedelta(days=7),
        status=EventStatus.APPROVED,
        organizer_id=organizer.id,
    )
    fields.update(overrides)
    event = Event(**fields)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def login(client, profile: Profile) -> dict:
    response = client.post("/api/auth/login", json={"email": profile.email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def student(db):
    return make_profile(db, UserRole.STUDENT, full_name="Ada Student")


@pytest.fixture
def organizer(db):
    return make_profile(db, UserRole.ORGANIZER, full_name="Olu Organizer")


@pytest.fixture
def faculty(db):
    return make_profile(db, UserRole.FACULTY, full_name="Fay Faculty")


@pytest.fixture
def approved_event(db, organizer):
    return make_event(db, organizer)
