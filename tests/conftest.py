"""Shared fixtures for API tests: in-memory database, fresh app, captured mail."""
import os

# settings 는 import 시점에 읽히므로 먼저 설정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret-0123456789abcdef"
os.environ["ADMIN_APPROVAL_SECRET"] = "test-approval-secret-0123456789abcdef"
os.environ["REGISTER_MIN_DURATION_SECONDS"] = "0"
os.environ["SMTP_HOST"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["RECAPTCHA_SECRET_KEY"] = ""

import re

import pytest
from fastapi.testclient import TestClient

from app.core.db import Base, SessionLocal, engine
from app.main import create_app
from app.models.user import User
from app.services import auth as auth_service
from app.services import mailer

PASSWORD = "Passw0rdOK"


@pytest.fixture(autouse=True)
def fresh_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Every outgoing mail as (to, subject, text)."""
    sent = []

    def fake_send(to_email, subject, text, html):
        sent.append((to_email, subject, text))
        return True

    monkeypatch.setattr(mailer, "send_email", fake_send)
    monkeypatch.setattr(mailer, "smtp_is_configured", lambda: True)
    return sent


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user():
    """Create a user directly in the database. Approved users get a board."""

    def _make(email="alice@example.com", name="Alice", password=PASSWORD, verified=True, approved=True):
        with SessionLocal() as db:
            user = auth_service.create_user(db, email, password, name)
            user.email_verified = verified
            if approved:
                auth_service.approve_user(db, user)
            db.commit()
            return user.id

    return _make


def login(client, email="alice@example.com", password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.fixture
def auth_client(client, make_user):
    make_user()
    r = login(client)
    assert r.status_code == 200, r.text
    return client


def token_from(outbox, subject_part):
    for _to, subject, text in reversed(outbox):
        if subject_part in subject:
            return re.search(r"token=([0-9a-f]+)", text).group(1)
    raise AssertionError(f"no mail with subject containing {subject_part!r}")


def get_user(user_id):
    with SessionLocal() as db:
        return db.get(User, user_id)
