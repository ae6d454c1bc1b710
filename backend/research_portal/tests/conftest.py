import os
os.environ["TESTING"] = "1"
os.environ.setdefault("SECRET_KEY", "test-secret")
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import sys
from pathlib import Path

import uuid

sys.path.append(str(Path(__file__).resolve().parents[2]))

from research_portal.main import app
from research_portal.database import Base, enable_sqlite_foreign_keys, get_db
from research_portal import models

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


def ensure_access_token(client, *, email: str | None = None, password: str = "secret"):
    """
    purpose: register or log in a test account and return its bearer token
    outputs: tuple(access_token str, normalized email str)
    """

    normalized_email = email or f"user-{uuid.uuid4()}@example.com"
    payload = {"email": normalized_email, "password": password}
    resp = client.post("/api/auth/register", json=payload)
    if resp.status_code == 200:
        data = resp.json()
    elif resp.status_code == 400 and resp.json().get("detail") == "Email already registered":
        login_resp = client.post("/api/auth/login", json=payload)
        assert login_resp.status_code == 200, login_resp.text
        data = login_resp.json()
    else:
        raise AssertionError(f"Unexpected auth bootstrap failure for {normalized_email}: {resp.status_code} {resp.text}")
    return data["access_token"], normalized_email


def ensure_auth_headers(client, *, email: str | None = None, password: str = "secret", role: str | None = None):
    """
    purpose: authorization headers for API tests, optionally for an office role
    depends_on: ensure_access_token
    outputs: tuple(headers dict, normalized email str)
    """

    token, normalized_email = ensure_access_token(client, email=email, password=password)
    if role:
        db = TestingSessionLocal()
        try:
            user = db.query(models.User).filter(models.User.email == normalized_email).one()
            user.role = role
            db.commit()
        finally:
            db.close()
    return {"Authorization": f"Bearer {token}"}, normalized_email


def create_scientist(client, headers, **overrides):
    suffix = uuid.uuid4().hex[:8]
    payload = {
        "name": f"Scientist {suffix}",
        "email": f"scientist-{suffix}@example.com",
        "title": "Investigator",
        "staff_id": f"S-{suffix}",
        "department": "Biology",
    }
    payload.update(overrides)
    resp = client.post("/api/scientists/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
