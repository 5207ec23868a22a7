from unittest.mock import MagicMock

import pytest

from newsdesk import main
from newsdesk.core.config import get_settings
from newsdesk.services.content import description, extract_text
from newsdesk.services.images import get_image_url

CDN = "https://cdn.example.com"
LEGACY = "newsdesk-media.s3"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_import_builds_no_app():
    assert not hasattr(main, "app")
    assert get_settings() is get_settings()


def test_tags_are_lowercased_and_ranked(client, make_article):
    make_article(tags=["Climate", "Energy"])
    make_article(tags=["climate", "Transport"])
    make_article(tags=[" CLIMATE ", "energy"])

    items = client.get("/tags").json()["items"]
    assert items[0] == {"name": "climate", "count": 3}
    assert items[1] == {"name": "energy", "count": 2}
    assert {"name": "transport", "count": 1} in items


class TestSubscribers:
    def test_subscribe(self, client, admin):
        resp = client.post("/subscribe", json={"email": " Reader@Example.com ", "name": "Reader"})
        assert resp.status_code == 201
        assert resp.json()["email"] == "reader@example.com"
        assert resp.json()["isActive"] is True

        resp = client.get("/subscribers", headers=admin["headers"])
        assert [s["email"] for s in resp.json()["items"]] == ["reader@example.com"]

    def test_invalid_and_duplicate(self, client):
        assert client.post("/subscribe", json={"email": "not-an-email"}).status_code == 400
        assert client.post("/subscribe", json={}).status_code == 400
        assert client.post("/subscribe", json={"email": "a@example.com"}).status_code == 201
        assert client.post("/subscribe", json={"email": "A@example.com"}).status_code == 409

    def test_unsubscribe_and_reactivate(self, client, admin):
        first = client.post("/subscribe", json={"email": "a@example.com"}).json()
        assert client.post("/unsubscribe", json={"email": "a@example.com"}).status_code == 204
        assert client.get("/subscribers", headers=admin["headers"]).json()["items"] == []

        resp = client.post("/subscribe", json={"email": "a@example.com", "preferences": {"weekly": True}})
        assert resp.status_code == 201
        assert resp.json()["id"] == first["id"]
        assert resp.json()["preferences"] == {"weekly": True}
        assert resp.json()["unsubscribedAt"] is None

    def test_unsubscribe_unknown(self, client):
        assert client.post("/unsubscribe", json={"email": "ghost@example.com"}).status_code == 404

    def test_list_requires_admin(self, client, editor):
        assert client.get("/subscribers", headers=editor["headers"]).status_code == 403


def test_contact_accepts_extra_fields(client):
    resp = client.post("/contact", json={"name": "A", "email": "a@example.com", "message": "hi", "phone": "123"})
    assert resp.status_code == 204


class TestSharePage:
    def test_published_article(self, client, make_article, publish):
        article = make_article(
            title='Tides & "Time"',
            summary="A look at the harbour.",
            coverImageUrl="https://newsdesk-media.s3.amazonaws.com/covers/tide.jpg",
        )
        publish(article["id"])

        resp = client.get(f"/share/article/{article['slug']}")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        html = resp.text
        assert '<meta property="og:title" content="Tides &amp; &quot;Time&quot;" />' in html
        assert '<meta property="og:description" content="A look at the harbour." />' in html
        assert f'content="{CDN}/covers/tide.jpg"' in html
        assert f'<link rel="canonical" href="https://news.example.com/article/{article["slug"]}" />' in html
        assert 'property="article:published_time"' in html
        assert 'name="twitter:card" content="summary_large_image"' in html

    def test_draft_is_hidden(self, client, make_article):
        article = make_article(title="Not yet")
        assert client.get(f"/share/article/{article['slug']}").status_code == 404

    def test_unknown_slug(self, client):
        assert client.get("/share/article/missing").status_code == 404


class TestUploadUrl:
    def test_requires_staff(self, client):
        assert client.post("/upload-url", json={"fileName": "a.png", "contentType": "image/png"}).status_code == 401

    def test_presigned_put(self, app, client, author):
        s3 = MagicMock()
        s3.generate_presigned_url.return_value = "https://signed.example/put"
        app.state.s3_client = s3

        resp = client.post(
            "/upload-url", json={"fileName": "photos/cat.png", "contentType": "image/png"}, headers=author["headers"]
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["uploadUrl"] == "https://signed.example/put"
        assert body["fileKey"].endswith("-cat.png")
        assert body["fileUrl"] == f"https://newsdesk-media.s3.amazonaws.com/{body['fileKey']}"

        args, kwargs = s3.generate_presigned_url.call_args
        assert args == ("put_object",)
        assert kwargs["Params"]["Key"] == body["fileKey"]
        assert kwargs["Params"]["ContentType"] == "image/png"
        assert kwargs["Params"]["CacheControl"] == "max-age=31536000"
        assert kwargs["ExpiresIn"] == 300

    def test_missing_fields(self, app, client, author):
        app.state.s3_client = MagicMock()
        resp = client.post("/upload-url", json={"fileName": "a.png"}, headers=author["headers"])
        assert resp.status_code == 400


class TestContent:
    def test_extract_text_skips_hidden_blocks(self):
        html = (
            "<p>Visible <b>text</b></p>"
            "<script>var x = 1;</script>"
            '<div style="display: none">gallery-meta</div>'
            '<span aria-hidden="true">icon</span>'
            "<p hidden>secret</p>"
        )
        assert extract_text(html) == "Visible text"

    def test_extract_text_empty(self):
        assert extract_text(None) == ""
        assert extract_text("") == ""

    def test_description_prefers_summary(self):
        assert description("  Short summary ", "<p>Body</p>") == "Short summary"
        assert description("", "<p>Body text</p>") == "Body text"

    def test_description_truncates_on_word(self):
        text = "word " * 100
        out = description(None, f"<p>{text}</p>", max_chars=22)
        assert out == "word word word word…"


@pytest.mark.parametrize(
    "path, expected",
    [
        (None, f"{CDN}/placeholder.png"),
        ("", f"{CDN}/placeholder.png"),
        (f"{CDN}/a/b.jpg", f"{CDN}/a/b.jpg"),
        ("https://newsdesk-media.s3.us-east-1.amazonaws.com/a/b.jpg", f"{CDN}/a/b.jpg"),
        ("uploads/b.jpg", f"{CDN}/uploads/b.jpg"),
        ("/uploads/b.jpg", f"{CDN}/uploads/b.jpg"),
        ("https://images.example.org/b.jpg", "https://images.example.org/b.jpg"),
    ],
)
def test_get_image_url(path, expected):
    assert get_image_url(path, CDN + "/", LEGACY) == expected
