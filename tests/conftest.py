# tests/conftest.py
"""
Pytest configuration.

The environment is set BEFORE any app import: app.core.config reads it once
at import time. Every test gets a fresh in-memory SQLite schema.
"""

import os

os.environ["APP_ENV"] = "development"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["AUTH_WEBHOOK_SECRET"] = ""
os.environ["PAYMENT_WEBHOOK_SECRET"] = ""
os.environ["COMMISSION_RATE"] = "0.10"
os.environ["AUTO_MIGRATE_ON_STARTUP"] = "false"

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import app.db.base  # noqa: F401
from app.core.caller import Caller
from app.core.security import create_access_token
from app.db.base_class import Base
from app.db.session import SessionLocal, engine, get_db
from app.main import app as fastapi_app
from app.models.lesson import Lesson, Subject
from app.models.profile import Profile


# ============================================================================
# Database
# ============================================================================


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _override_get_db():
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def client():
    fastapi_app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


# ============================================================================
# Service-level builders
# ============================================================================


@pytest.fixture
def make_profile(db):
    def _make(user_type="student", email=None, full_name=None, **fields):
        profile = Profile(
            id=uuid.uuid4(),
            email=email or f"{uuid.uuid4().hex[:10]}@example.com",
            full_name=full_name or f"Test {user_type.title()}",
            user_type=user_type,
            **fields,
        )
        db.add(profile)
        db.flush()
        return profile

    return _make


@pytest.fixture
def teacher(make_profile):
    return make_profile("teacher", full_name="Tariq Teacher")


@pytest.fixture
def student(make_profile):
    return make_profile("student", full_name="Sara Student")


@pytest.fixture
def admin(make_profile):
    return make_profile("admin", full_name="Adam Admin")


@pytest.fixture
def subject(db):
    subject = Subject(name="Mathematics", description="Numbers", icon_name="Calculator")
    db.add(subject)
    db.flush()
    return subject


@pytest.fixture
def make_lesson(db, subject):
    def _make(teacher, price=Decimal("100.00"), is_active=True, **fields):
        lesson = Lesson(
            teacher_id=teacher.id,
            subject_id=subject.id,
            title=fields.pop("title", "Algebra basics"),
            description=fields.pop("description", "Linear equations from scratch"),
            price=price,
            is_active=is_active,
            **fields,
        )
        db.add(lesson)
        db.flush()
        return lesson

    return _make


@pytest.fixture
def lesson(make_lesson, teacher):
    return make_lesson(teacher)


def caller_for(profile) -> Caller:
    return Caller(id=profile.id, role=profile.user_type)


def in_days(days: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


# ============================================================================
# API-level helpers
# ============================================================================


def auth_headers(profile_id) -> dict:
    return {"Authorization": f"Bearer {create_access_token(profile_id)}"}


@pytest.fixture
def register(client):
    """Bootstrap a profile through the identity webhook and return (id, headers)."""

    def _register(user_type="student", full_name=None, email=None):
        identity_id = uuid.uuid4()
        response = client.post(
            "/api/v1/auth/identity-events",
            json={
                "id": str(identity_id),
                "email": email or f"{identity_id.hex[:10]}@example.com",
                "metadata": {"full_name": full_name, "user_type": user_type},
            },
        )
        assert response.status_code == 201, response.text
        return identity_id, auth_headers(identity_id)

    return _register
