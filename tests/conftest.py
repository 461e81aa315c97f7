"""
Pytest configuration and fixtures for the clinic backend tests.

Every test runs against a fresh in-memory SQLite schema.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-clinic-backend-tests")
os.environ.setdefault("OTP_SWEEP_ENABLED", "false")
os.environ.setdefault("TWILIO_ACCOUNT_SID", "")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "")
os.environ.setdefault("TWILIO_PHONE_NUMBER", "")

import pytest
from fastapi.testclient import TestClient

from clinic.database import Base, engine, init_db
from clinic.main import app
from clinic.schemas.users import Role, UserCreate
from clinic.services.accounts import SqlAccountDirectory
from clinic.services.challenges import SqlChallengeStore
from clinic.services.otp import OtpManager, get_otp_manager
from clinic.services.users import user_store


class RecordingSender:
    """Captures outgoing SMS instead of talking to a provider."""

    def __init__(self):
        self.messages = []

    def __call__(self, phone, body):
        self.messages.append((phone, body))

    @property
    def last_code(self):
        phone, body = self.messages[-1]
        return body.split(": ", 1)[1].split("\n", 1)[0]


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def otp_manager(sender):
    return OtpManager(SqlChallengeStore(), SqlAccountDirectory(), sender=sender)


@pytest.fixture
def client(otp_manager):
    app.dependency_overrides[get_otp_manager] = lambda: otp_manager
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(username, role, password="secret123", email=None):
    return user_store.create_user(
        UserCreate(
            username=username,
            email=email or f"{username}@clinic.test",
            password=password,
            role=role,
        )
    )


def login(client, username, password="secret123"):
    response = client.post(
        "/api/auth/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    make_user("admin", Role.ADMIN)
    return login(client, "admin")


@pytest.fixture
def receptionist_headers(client):
    make_user("resepsiyon", Role.RECEPTIONIST)
    return login(client, "resepsiyon")
