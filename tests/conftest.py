"""
pytest configuration for the linkBD API.

Points the app at an in-memory SQLite database before anything imports it,
and recreates the schema for every test.
"""
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="linkbd-logs-"))

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models.Member import Member
from models.Organization import Organization
from models.User import User
from schemas import MemberRole


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed(db):
    """User u1 owning organization org1, plus a second user u2."""
    db.add_all([
        User(id="u1", name="Ana", email="ana@example.com"),
        User(id="u2", name="Bo", email="bo@example.com"),
        Organization(id="org1", name="Ana's Bakery", slug="anas-bakery"),
    ])
    db.flush()
    db.add(Member(organization_id="org1", user_id="u1", role=MemberRole.OWNER))
    db.commit()
    return db


def create_user(client, name, email):
    resp = client.post("/users/", json={"name": name, "email": email})
    assert resp.status_code == 201, resp.text
    return resp.json()


def sign_in(client, user_id):
    resp = client.post("/sessions/", json={"user_id": user_id})
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def create_org(client, headers, name, slug):
    resp = client.post("/organizations/", json={"name": name, "slug": slug}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def switch_to(client, headers, organization_id):
    return client.put(
        "/sessions/me/active-organization",
        json={"organization_id": organization_id},
        headers=headers,
    )
