# tests/test_admin_setup.py
from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.errors import ProvisioningError
from app.core.settings import settings
from app.models.auth import AuthIdentity, User, UserRole
from app.services import setup_service
from app.services.passwords import verify_password

API = settings.API_V1_STR
KEY = {"X-Service-Key": "test-service-key"}
BODY = {"email": "root@example.com", "password": "s3cret!", "firstName": "Ada", "lastName": "Admin"}


@pytest.fixture(autouse=True)
def _service_key(monkeypatch):
    monkeypatch.setattr(settings, "SETUP_SERVICE_KEY", "test-service-key")


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def test_setup_creates_identity_and_admin_profile(client, db):
    r = client.post(f"{API}/setup/admin", json=BODY, headers=KEY)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["created"] is True
    assert body["message"] == "Admin user created successfully"

    profile = db.get(User, body["userId"])
    assert profile.role == UserRole.admin
    assert (profile.first_name, profile.last_name) == ("Ada", "Admin")
    identity = db.get(AuthIdentity, body["userId"])
    assert identity.email_confirmed is True
    assert verify_password("s3cret!", identity.hashed_password)


def test_setup_is_idempotent(client, db):
    first = client.post(f"{API}/setup/admin", json=BODY, headers=KEY).json()
    r = client.post(f"{API}/setup/admin", json=BODY, headers=KEY)
    assert r.status_code == 200
    assert r.json()["created"] is False
    assert r.json()["userId"] == first["userId"]
    assert _count(db, AuthIdentity) == 1
    assert _count(db, User) == 1


def test_setup_requires_service_key(client):
    assert client.post(f"{API}/setup/admin", json=BODY).status_code == 401
    assert client.post(f"{API}/setup/admin", json=BODY, headers={"X-Service-Key": "nope"}).status_code == 401


def test_setup_unconfigured_key(client, monkeypatch):
    monkeypatch.setattr(settings, "SETUP_SERVICE_KEY", None)
    assert client.post(f"{API}/setup/admin", json=BODY, headers=KEY).status_code == 503


def test_failed_profile_insert_removes_identity(db, monkeypatch):
    def broken_insert(db, identity, first_name, last_name):
        raise IntegrityError("INSERT INTO users", {}, Exception("boom"))

    monkeypatch.setattr(setup_service, "_insert_profile", broken_insert)
    with pytest.raises(ProvisioningError):
        setup_service.provision_admin(db, email="root@example.com", password="pw")

    assert _count(db, AuthIdentity) == 0
    assert _count(db, User) == 0


def test_profile_email_clash_rolls_back(client, db):
    # profile row without a login identity: the insert fails on users.email
    db.add(User(id="00000000-0000-4000-8000-000000000000", email="root@example.com", role=UserRole.viewer))
    db.commit()

    r = client.post(f"{API}/setup/admin", json=BODY, headers=KEY)
    assert r.status_code == 500
    assert _count(db, AuthIdentity) == 0


def test_login_after_setup(client):
    client.post(f"{API}/setup/admin", json=BODY, headers=KEY)
    r = client.post(f"{API}/auth/login", json={"email": BODY["email"], "password": BODY["password"]})
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["role"] == "admin"

    bad = client.post(f"{API}/auth/login", json={"email": BODY["email"], "password": "wrong"})
    assert bad.status_code == 401
