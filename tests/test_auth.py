"""Login, registration, token refresh and the role gate."""

import datetime as dt
import json

import jwt
import pytest
from fastapi.testclient import TestClient

from conftest import ADMIN, bearer
from newsdesk.core.config import Settings
from newsdesk.core.errors import AuthError, ForbiddenError, UpstreamError
from newsdesk.core.security import (
    authenticate,
    create_access_token,
    get_token_from_header,
    hash_password,
    verify_password,
    verify_token,
)
from newsdesk.main import create_app
from newsdesk.models import User, UserRole
from newsdesk.store import MemoryDocumentStore


class TestPasswordsAndTokens:
    def test_hash_roundtrip(self):
        hashed = hash_password("s3cret", rounds=4)
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)
        assert not verify_password("s3cret", None)
        assert not verify_password("s3cret", "not-a-bcrypt-hash")

    def test_token_payload(self, settings):
        user = User.create(name="Ed", email="ed@example.com", role=UserRole.EDITOR)
        token = create_access_token(user, settings)
        payload = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
        assert payload["userId"] == user.id
        assert payload["email"] == "ed@example.com"
        assert payload["role"] == "EDITOR"
        assert payload["exp"] - payload["iat"] == 3600

    def test_expired_token_is_rejected(self, settings):
        user = User.create(name="Ed", email="ed@example.com")
        old = dt.datetime.now(dt.timezone.utc) - dt.timedelta(hours=2)
        token = create_access_token(user, settings, now=old)
        with pytest.raises(AuthError):
            verify_token(token, settings)

    def test_token_signed_with_other_secret_is_rejected(self, settings):
        user = User.create(name="Ed", email="ed@example.com")
        other = Settings(JWT_SECRET="another-secret-0123456789abcdef012345")
        with pytest.raises(AuthError):
            verify_token(create_access_token(user, other), settings)

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "bearer abc", "Token abc", "Bearer a b", "Basic abc"])
    def test_malformed_header(self, header):
        with pytest.raises(AuthError):
            get_token_from_header(header)

    def test_role_list_has_no_implicit_hierarchy(self, settings):
        admin = User.create(name="Root", email="root@example.com", role=UserRole.ADMIN)
        header = f"Bearer {create_access_token(admin, settings)}"
        with pytest.raises(ForbiddenError):
            authenticate(header, settings, (UserRole.EDITOR,))
        assert authenticate(header, settings, (UserRole.EDITOR, UserRole.ADMIN)).user_id == admin.id
        assert authenticate(header, settings).role == UserRole.ADMIN


class TestRegisterAndLogin:
    def test_first_user_is_admin_then_authors(self, client):
        first = client.post("/register", json={"name": "First", "email": "first@example.com", "password": "pw12345"})
        second = client.post("/auth/register", json={"name": "Second", "email": "second@example.com", "password": "pw12345"})
        assert first.status_code == 201 and second.status_code == 201
        assert first.json()["role"] == "ADMIN"
        assert second.json()["role"] == "AUTHOR"
        assert "password" not in first.json()
        assert first.json()["avatarUrl"].startswith("https://ui-avatars.com/api/?name=First")

    def test_register_without_password_returns_temporary_one(self, client):
        resp = client.post("/register", json={"name": "Temp", "email": "temp@example.com"})
        assert resp.status_code == 201
        temp = resp.json()["temporaryPassword"]
        assert len(temp) == 8
        assert client.post("/login", json={"email": "temp@example.com", "password": temp}).status_code == 200

    def test_register_duplicate_email_is_409(self, client, admin):
        resp = client.post("/register", json={"name": "Again", "email": ADMIN["email"].upper(), "password": "x1234"})
        assert resp.status_code == 409

    def test_register_missing_fields_is_400(self, client):
        assert client.post("/register", json={"email": "x@example.com"}).status_code == 400

    def test_login_returns_public_user_and_tokens(self, client, admin):
        resp = client.post("/auth/login", json={"email": ADMIN["email"], "password": ADMIN["password"]})
        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"user", "token", "refreshToken"}
        assert "password" not in body["user"] and "refreshToken" not in body["user"]

    def test_login_email_case_insensitive(self, client, admin):
        resp = client.post("/login", json={"email": "  Admin@Vadali.com ", "password": ADMIN["password"]})
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "admin@vadali.com"

    def test_bad_credentials_are_indistinguishable(self, client, admin):
        wrong_pw = client.post("/login", json={"email": ADMIN["email"], "password": "nope"})
        no_user = client.post("/login", json={"email": "ghost@vadali.com", "password": "nope"})
        assert wrong_pw.status_code == no_user.status_code == 401
        assert wrong_pw.json() == no_user.json() == {"message": "Invalid email or password"}

    def test_login_missing_fields_is_400(self, client):
        assert client.post("/login", json={"email": "a@b.com"}).status_code == 400
        assert client.post("/login", json={}).status_code == 400


class TestRefreshAndLogout:
    def test_refresh_rotates_token(self, client, admin):
        first = client.post("/auth/refresh", json={"refreshToken": admin["refreshToken"]})
        assert first.status_code == 200
        rotated = first.json()["refreshToken"]
        assert rotated != admin["refreshToken"]
        assert client.post("/auth/refresh", json={"refreshToken": admin["refreshToken"]}).status_code == 401
        assert client.post("/auth/refresh", json={"refreshToken": rotated}).status_code == 200

    def test_logout_invalidates_refresh_token(self, client, admin):
        assert client.post("/auth/logout", headers=admin["headers"]).status_code == 204
        assert client.post("/auth/refresh", json={"refreshToken": admin["refreshToken"]}).status_code == 401

    def test_logout_requires_token(self, client):
        assert client.post("/auth/logout").status_code == 401


class TestGate:
    def test_invalid_token_is_401(self, client):
        resp = client.post("/articles", json={"title": "x"}, headers=bearer("garbage"))
        assert resp.status_code == 401

    def test_insufficient_role_is_403(self, client, author):
        assert client.get("/users", headers=author["headers"]).status_code == 403

    def test_lowercase_bearer_is_rejected(self, client, admin):
        token = admin["headers"]["Authorization"].split(" ", 1)[1]
        resp = client.get("/users", headers={"Authorization": f"bearer {token}"})
        assert resp.status_code == 401


class FailingEmailLookupStore(MemoryDocumentStore):
    async def query(self, table, index, key_attr, key_value, conditions=(), limit=None, start_key=None):
        raise UpstreamError("Document store failure")


def test_login_falls_back_to_users_file(tmp_path):
    users_file = tmp_path / "users.json"
    users_file.write_text(
        json.dumps(
            [
                {
                    "id": "u_fallback",
                    "name": "Fallback Admin",
                    "email": "admin@vadali.com",
                    "password": hash_password("Admin@1234", rounds=4),
                    "role": "ADMIN",
                }
            ]
        )
    )
    settings = Settings(
        JWT_SECRET="test-secret-0123456789abcdef0123456789",
        STORE_BACKEND="memory",
        FALLBACK_USERS_FILE=str(users_file),
    )
    app = create_app(settings=settings, store=FailingEmailLookupStore())
    with TestClient(app) as client:
        ok = client.post("/login", json={"email": "Admin@Vadali.com", "password": "Admin@1234"})
        bad = client.post("/login", json={"email": "admin@vadali.com", "password": "wrong"})
    assert ok.status_code == 200
    assert ok.json()["user"]["id"] == "u_fallback"
    assert bad.status_code == 401


def test_login_without_fallback_surfaces_store_failure(settings):
    app = create_app(settings=settings, store=FailingEmailLookupStore())
    with TestClient(app) as client:
        resp = client.post("/login", json={"email": "admin@vadali.com", "password": "x"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}


def test_production_rejects_weak_secret():
    with pytest.raises(ValueError):
        Settings(APP_ENV="production", JWT_SECRET="short")
    assert Settings(APP_ENV="production", JWT_SECRET="p" * 32).is_production
