"""Shared fixtures: an app wired to a fresh in-memory store and role-scoped logins."""

import pytest
from fastapi.testclient import TestClient

from newsdesk.core.config import Settings
from newsdesk.main import create_app
from newsdesk.store import MemoryDocumentStore

ADMIN = {"name": "Admin User", "email": "admin@vadali.com", "password": "Admin@1234"}
EDITOR = {"name": "Eddie Editor", "email": "editor@vadali.com", "password": "Editor@1234", "role": "EDITOR"}
AUTHOR = {"name": "Ada Author", "email": "author@vadali.com", "password": "Author@1234", "role": "AUTHOR"}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def settings():
    return Settings(
        JWT_SECRET="test-secret-0123456789abcdef0123456789",
        STORE_BACKEND="memory",
        BCRYPT_ROUNDS=4,
        LOG_LEVEL="WARNING",
        SITE_URL="https://news.example.com",
        CDN_DOMAIN="https://cdn.example.com",
    )


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def _login(client, email, password):
    resp = client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    return {"user": data["user"], "headers": bearer(data["token"]), "refreshToken": data["refreshToken"]}


@pytest.fixture
def login(client):
    def _do(email, password):
        return _login(client, email, password)

    return _do


@pytest.fixture
def admin(client):
    resp = client.post("/register", json={k: ADMIN[k] for k in ("name", "email", "password")})
    assert resp.status_code == 201, resp.text
    return _login(client, ADMIN["email"], ADMIN["password"])


def _staff(client, admin, payload):
    resp = client.post("/users", json=payload, headers=admin["headers"])
    assert resp.status_code == 201, resp.text
    return _login(client, payload["email"], payload["password"])


@pytest.fixture
def editor(client, admin):
    return _staff(client, admin, EDITOR)


@pytest.fixture
def author(client, admin):
    return _staff(client, admin, AUTHOR)


@pytest.fixture
def make_article(client, author):
    def _make(headers=None, **fields):
        body = {"title": "Untitled story", "summary": "", "content": "<p>Body</p>"}
        body.update(fields)
        resp = client.post("/articles", json=body, headers=headers or author["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def publish(client, author, editor):
    """Move an article through review to Published and return the response body."""

    def _publish(article_id, **extra):
        resp = client.patch(
            f"/articles/{article_id}/status", json={"status": "Pending Review"}, headers=author["headers"]
        )
        assert resp.status_code == 200, resp.text
        resp = client.patch(
            f"/articles/{article_id}/status", json={"status": "Published", **extra}, headers=editor["headers"]
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _publish
