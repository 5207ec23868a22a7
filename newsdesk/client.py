"""Async HTTP client for the Newsdesk API.

Wraps the JSON endpoints with typed helpers, bearer token handling and a
single ``ApiError`` for non-2xx responses. ``fetch_all_articles`` walks the
cursor until the server reports no more pages and can sort the collected
items locally, since the store gives no global order across pages.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from newsdesk.models.base import parse_iso
from newsdesk.services.images import get_image_url
from newsdesk.services.status import normalize_status

logger = structlog.get_logger()

DEFAULT_ARTICLE_LIMIT = 20
MAX_FETCH_ALL_ITEMS = 400
SORTABLE_FIELDS = ("createdAt", "updatedAt", "publishedAt", "title")


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


def normalize_article(raw: dict[str, Any]) -> dict[str, Any]:
    article = dict(raw)
    article["status"] = normalize_status(article.get("status")).value
    article["imageUrls"] = article.get("imageUrls") or []
    article["comments"] = article.get("comments") or []
    article["tags"] = article.get("tags") or []
    return article


def _timestamp(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        return parse_iso(value).timestamp()
    except ValueError:
        return 0.0


def sort_articles(articles: list[dict[str, Any]], sort_by: str, descending: bool = True) -> list[dict[str, Any]]:
    if sort_by not in SORTABLE_FIELDS:
        raise ValueError(f"Unsupported sort field: {sort_by}")
    if sort_by == "title":
        return sorted(articles, key=lambda a: (a.get("title") or "").lower(), reverse=descending)
    return sorted(articles, key=lambda a: _timestamp(a.get(sort_by)), reverse=descending)


class NewsdeskClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        timeout_s: float = 10.0,
        cdn_domain: str = "https://cdn.example.com",
        legacy_s3_host_marker: str = "newsdesk-media.s3",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.refresh_token = refresh_token
        self.cdn_domain = cdn_domain
        self.legacy_s3_host_marker = legacy_s3_host_marker
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "NewsdeskClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def request(self, method: str, path: str, retry_auth: bool = True, **kwargs) -> Any:
        resp = await self._client.request(method, path, headers=self._headers(), **kwargs)

        if resp.status_code == 401 and retry_auth and self.refresh_token and path != "/auth/refresh":
            await self.refresh()
            return await self.request(method, path, retry_auth=False, **kwargs)

        if resp.status_code >= 400:
            try:
                data = resp.json()
            except ValueError:
                data = None
            message = data.get("message") if isinstance(data, dict) else None
            message = message or resp.text or resp.reason_phrase
            logger.warning("api_request_failed", method=method, path=path, status=resp.status_code, error=message)
            raise ApiError(resp.status_code, message)

        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def image_url(self, path: Optional[str]) -> str:
        return get_image_url(path, self.cdn_domain, self.legacy_s3_host_marker)

    # auth

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self.request("POST", "/auth/login", retry_auth=False, json={"email": email, "password": password})
        self.token = data["token"]
        self.refresh_token = data["refreshToken"]
        return data["user"]

    async def register(self, name: str, email: str, password: Optional[str] = None) -> dict[str, Any]:
        body = {"name": name, "email": email}
        if password:
            body["password"] = password
        return await self.request("POST", "/auth/register", json=body)

    async def refresh(self) -> str:
        data = await self.request(
            "POST", "/auth/refresh", retry_auth=False, json={"refreshToken": self.refresh_token}
        )
        self.token = data["token"]
        self.refresh_token = data["refreshToken"]
        return self.token

    async def logout(self) -> None:
        await self.request("POST", "/auth/logout", retry_auth=False)
        self.token = None
        self.refresh_token = None

    # articles

    async def list_articles(
        self, limit: Optional[int] = None, cursor: Optional[str] = None, **filters: Any
    ) -> dict[str, Any]:
        params = {k: v for k, v in filters.items() if v is not None}
        if limit is not None:
            params["limit"] = limit
        if cursor:
            params["cursor"] = cursor
        for key, value in params.items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
        page = await self.request("GET", "/articles", params=params)
        page["items"] = [normalize_article(a) for a in page.get("items") or []]
        return page

    async def fetch_all_articles(
        self,
        page_size: int = DEFAULT_ARTICLE_LIMIT,
        sort_by: Optional[str] = None,
        descending: bool = True,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        cursor = None
        while True:
            page = await self.list_articles(limit=page_size, cursor=cursor, **filters)
            items.extend(page["items"])
            if len(items) >= MAX_FETCH_ALL_ITEMS:
                logger.warning("fetch_all_capped", collected=len(items))
                items = items[:MAX_FETCH_ALL_ITEMS]
                break
            cursor = page.get("cursor")
            if not page.get("hasMore") or not cursor:
                break
        if sort_by:
            items = sort_articles(items, sort_by, descending)
        return items

    async def get_article(self, article_id: str) -> dict[str, Any]:
        return normalize_article(await self.request("GET", f"/articles/id/{article_id}"))

    async def get_article_by_slug(self, slug: str) -> dict[str, Any]:
        return normalize_article(await self.request("GET", f"/articles/slug/{slug}"))

    async def create_article(self, article: dict[str, Any]) -> dict[str, Any]:
        return normalize_article(await self.request("POST", "/articles", json=article))

    async def update_article(self, article_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return normalize_article(await self.request("PUT", f"/articles/{article_id}", json=fields))

    async def delete_article(self, article_id: str) -> None:
        await self.request("DELETE", f"/articles/{article_id}")

    async def update_article_status(
        self, article_id: str, status: str, reason: Optional[str] = None, published_at: Optional[str] = None
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"status": status}
        if reason is not None:
            body["reason"] = reason
        if published_at is not None:
            body["publishedAt"] = published_at
        return normalize_article(await self.request("PATCH", f"/articles/{article_id}/status", json=body))

    async def record_view(self, article_id: str) -> int:
        return (await self.request("POST", f"/articles/{article_id}/views"))["views"]

    async def post_comment(self, article_id: str, text: str) -> dict[str, Any]:
        return await self.request("POST", f"/articles/{article_id}/comments", json={"text": text})

    # taxonomy and audience

    async def list_categories(self, show_in_header: Optional[bool] = None) -> list[dict[str, Any]]:
        params = {} if show_in_header is None else {"showInHeader": "true" if show_in_header else "false"}
        return (await self.request("GET", "/categories", params=params))["items"]

    async def list_tags(self) -> list[dict[str, Any]]:
        return (await self.request("GET", "/tags"))["items"]

    async def subscribe(self, email: str, name: Optional[str] = None) -> dict[str, Any]:
        body = {"email": email}
        if name:
            body["name"] = name
        return await self.request("POST", "/subscribe", json=body)

    async def unsubscribe(self, email: str) -> None:
        await self.request("POST", "/unsubscribe", json={"email": email})
