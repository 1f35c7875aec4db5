# tests/conftest.py

import os
import uuid
from datetime import time

# Settings are read at import time; point them at an in-memory database first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("JWT_AUDIENCE", None)

import pytest
from fastapi.testclient import TestClient

from core.database import ENGINE, SessionLocal
from core.security import create_access_token
from main import app
from models.base import Base
from models.class_group import ClassGroup
from models.profile import Profile
from models.timetable_session import TimetableSession


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)


@pytest.fixture
def client():
    return TestClient(app)


def seed(*objs):
    db = SessionLocal()
    try:
        db.add_all(objs)
        db.commit()
    finally:
        db.close()


def _profile(role, full_name):
    profile_id = uuid.uuid4()
    seed(Profile(id=profile_id, full_name=full_name, email=f"{role}@school.test", role=role))
    return profile_id


def _auth(profile_id, role):
    token = create_access_token(user_id=str(profile_id), role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_id():
    return _profile("admin", "Ada Admin")


@pytest.fixture
def admin_headers(admin_id):
    return _auth(admin_id, "admin")


@pytest.fixture
def student_headers():
    return _auth(_profile("student", "Sam Student"), "student")


@pytest.fixture
def teacher_id():
    return _profile("teacher", "Tom Teacher")


@pytest.fixture
def other_teacher_id():
    return _profile("teacher", "Tina Teacher")


@pytest.fixture
def class_id():
    cid = uuid.uuid4()
    seed(ClassGroup(id=cid, name="Form 1A"))
    return cid


@pytest.fixture
def other_class_id():
    cid = uuid.uuid4()
    seed(ClassGroup(id=cid, name="Form 2B"))
    return cid


@pytest.fixture
def stored_session(class_id, teacher_id):
    """Monday 09:00-10:00 Mathematics, already saved as a draft."""
    sid = uuid.uuid4()
    seed(
        TimetableSession(
            id=sid,
            class_id=class_id,
            teacher_id=teacher_id,
            subject="Mathematics",
            day_of_week="Monday",
            start_time=time(9, 0),
            end_time=time(10, 0),
            status="draft",
        )
    )
    return sid


@pytest.fixture
def db_seed():
    return seed
