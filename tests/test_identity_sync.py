import pytest
from sqlalchemy.exc import IntegrityError

from app.exceptions import ConflictException, UnauthorizedException
from app.models.user import User, UserRole
from app.services.identity_sync import ExternalIdentity, identity_from_token, sync_user


def _identity(**overrides):
    data = dict(uid="uid-1", email="pat@example.com", first_name="Pat", last_name="Lee")
    data.update(overrides)
    return ExternalIdentity(**data)


def test_sync_creates_then_reuses_row(db_session):
    first = sync_user(db_session, _identity())
    second = sync_user(db_session, _identity(first_name="Patricia"))

    assert first.id == second.id
    assert second.first_name == "Patricia"
    assert second.role == UserRole.user
    assert db_session.query(User).count() == 1


def test_sync_relinks_by_email(db_session):
    existing = User(external_id="old-uid", email="pat@example.com")
    db_session.add(existing)
    db_session.commit()

    user = sync_user(db_session, _identity(uid="new-uid"))
    assert user.id == existing.id
    assert user.external_id == "new-uid"
    assert db_session.query(User).count() == 1


def test_admin_claim_only_applies_on_creation(db_session):
    admin = sync_user(db_session, _identity(role_claim="admin"))
    assert admin.role == UserRole.admin

    plain = sync_user(db_session, _identity(uid="uid-2", email="sam@example.com"))
    assert plain.role == UserRole.user
    again = sync_user(db_session, _identity(uid="uid-2", email="sam@example.com", role_claim="admin"))
    assert again.role == UserRole.user


def test_sync_retries_after_unique_conflict(db_session, monkeypatch):
    real_commit = db_session.commit
    calls = {"n": 0}

    def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 1:
            raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))
        real_commit()

    monkeypatch.setattr(db_session, "commit", flaky_commit)
    user = sync_user(db_session, _identity())

    assert calls["n"] == 2
    assert user.email == "pat@example.com"
    assert db_session.query(User).count() == 1


def test_sync_gives_up_after_repeated_conflicts(db_session, monkeypatch):
    def always_conflicts():
        raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))

    monkeypatch.setattr(db_session, "commit", always_conflicts)
    with pytest.raises(ConflictException):
        sync_user(db_session, _identity())


def test_identity_from_token_splits_name():
    identity = identity_from_token({
        "uid": "abc",
        "email": " Kai@Example.com ",
        "name": "Kai Uwe Schmidt",
        "picture": "https://img.example.com/kai.png",
    })
    assert identity.email == "kai@example.com"
    assert identity.first_name == "Kai"
    assert identity.last_name == "Uwe Schmidt"
    assert identity.image_url == "https://img.example.com/kai.png"
    assert identity.role_claim is None


def test_identity_from_token_needs_email():
    with pytest.raises(UnauthorizedException):
        identity_from_token({"uid": "abc"})


def test_me_endpoint_syncs_once(client, db_session, user_headers):
    r1 = client.get("/api/users/me", headers=user_headers("nora"))
    r2 = client.post("/api/users", headers=user_headers("nora"))
    assert r1.status_code == 200
    assert r2.status_code == 200
    assert r1.json()["user"]["id"] == r2.json()["user"]["id"]
    assert r1.json()["user"]["email"] == "nora@example.com"
    assert r1.json()["is_admin"] is False
    assert db_session.query(User).count() == 1


def test_invalid_token_is_unauthorized(client, monkeypatch):
    from app.services import auth

    def _reject(token):
        raise ValueError("bad token")

    monkeypatch.setattr(auth.firebase_auth, "verify_id_token", _reject)
    r = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-real-token"})
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid or expired token"


def test_admin_sets_role(client, admin_headers, user_headers):
    user_id = client.get("/api/users/me", headers=user_headers("olga")).json()["user"]["id"]

    assert client.put(f"/api/users/{user_id}/role", json={"role": "admin"},
                      headers=user_headers("olga")).status_code == 403

    r = client.put(f"/api/users/{user_id}/role", json={"role": "ADMIN"}, headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["role"] == "admin"

    me = client.get("/api/users/me", headers=user_headers("olga")).json()
    assert me["is_admin"] is True

    listing = client.get("/api/users", headers=admin_headers).json()
    assert listing["total"] == 2


def test_role_update_rejects_unknown_role(client, admin_headers, user_headers):
    user_id = client.get("/api/users/me", headers=user_headers("pia")).json()["user"]["id"]
    r = client.put(f"/api/users/{user_id}/role", json={"role": "superuser"}, headers=admin_headers)
    assert r.status_code == 400
