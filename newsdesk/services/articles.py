from __future__ import annotations

import base64
import binascii
import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog

from newsdesk.core.config import Settings
from newsdesk.core.errors import ForbiddenError, NotFoundError, ValidationError
from newsdesk.core.security import Principal
from newsdesk.models import Article, ArticleStatus, NotificationType, UserRole
from newsdesk.models.base import parse_iso, to_iso, utc_now_iso
from newsdesk.repositories import (
    ArticleRepository,
    CategoryRepository,
    CommentRepository,
    NotificationRepository,
)
from newsdesk.services.normalize import normalize_tags, slugify
from newsdesk.services.notifications import notify
from newsdesk.services.status import is_all_statuses, normalize_status, parse_status, validate_transition
from newsdesk.store.base import Condition, DocumentStore, Key, eq

logger = structlog.get_logger()

SORT_KEYS: dict[str, Callable[[Article], Any]] = {
    "createdAt": lambda a: a.created_at or "",
    "publishedAt": lambda a: a.published_at or "",
    "views": lambda a: a.views,
}


def encode_cursor(key: Optional[Key]) -> Optional[str]:
    if not key:
        return None
    raw = json.dumps(key, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def decode_cursor(cursor: Optional[str]) -> Optional[Key]:
    if not cursor:
        return None
    pad = "=" * (-len(cursor) % 4)
    try:
        raw = base64.urlsafe_b64decode((cursor + pad).encode("utf-8"))
        key = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeDecodeError):
        raise ValidationError("Invalid cursor")
    if not isinstance(key, dict):
        raise ValidationError("Invalid cursor")
    return key


@dataclass
class ListPage:
    items: list[Any] = field(default_factory=list)
    cursor: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.cursor is not None

    def to_api(self, render: Callable[[Any], Any] = lambda item: item.to_api()) -> dict[str, Any]:
        return {"items": [render(i) for i in self.items], "cursor": self.cursor, "hasMore": self.has_more}


@dataclass
class ArticleFilters:
    category: Optional[str] = None
    category_id: Optional[str] = None
    category_slug: Optional[str] = None
    tag: Optional[str] = None
    author_id: Optional[str] = None
    query: Optional[str] = None
    status: Optional[str] = None
    featured: Optional[bool] = None
    is_advertisement: Optional[bool] = None
    limit: Optional[int] = None
    cursor: Optional[str] = None
    sort_by: Optional[str] = None


class ArticleService:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.settings = settings
        self.articles = ArticleRepository(store, settings)
        self.categories = CategoryRepository(store, settings)
        self.comments = CommentRepository(store, settings)
        self.notifications = NotificationRepository(store, settings)

    def _page_size(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.settings.default_page_size
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        if limit > self.settings.max_page_size:
            raise ValidationError(f"limit must not exceed {self.settings.max_page_size}")
        return limit

    async def _resolve_category(self, filters: ArticleFilters) -> tuple[bool, Optional[str]]:
        """Return (resolved, category_id); an unresolvable slug means no results."""
        if filters.category_id:
            return True, filters.category_id
        if filters.category_slug:
            category = await self.categories.find_by_slug(filters.category_slug)
            return (True, category.id) if category else (False, None)
        if filters.category:
            category = await self.categories.find_by_slug(filters.category)
            if category is None:
                category = await self.categories.get_by_id(filters.category)
            return (True, category.id) if category else (False, None)
        return True, None

    def _conditions(self, filters: ArticleFilters, category_id: Optional[str]) -> list[Condition]:
        conditions: list[Condition] = []
        if category_id:
            conditions.append(eq("categoryId", category_id))
        if filters.author_id:
            conditions.append(eq("authorId", filters.author_id))
        if filters.status is None or filters.status == "":
            conditions.append(eq("status", ArticleStatus.PUBLISHED.value))
        elif not is_all_statuses(filters.status):
            conditions.append(eq("status", normalize_status(filters.status).value))
        if filters.featured is not None:
            conditions.append(eq("isFeatured", filters.featured))
        if filters.is_advertisement is not None:
            conditions.append(eq("isAdvertisement", filters.is_advertisement))
        return conditions

    @staticmethod
    def _matches_text(article: Article, filters: ArticleFilters) -> bool:
        if filters.tag and not article.has_tag(filters.tag):
            return False
        if filters.query:
            needle = filters.query.strip().lower()
            haystacks = (article.title.lower(), (article.summary or "").lower())
            if not any(needle in h for h in haystacks):
                return False
        return True

    async def list_articles(self, filters: ArticleFilters) -> ListPage:
        if filters.sort_by and filters.sort_by not in SORT_KEYS:
            raise ValidationError(f"Unsupported sortBy: {filters.sort_by}")
        page_size = self._page_size(filters.limit)
        start_key = decode_cursor(filters.cursor)

        resolved, category_id = await self._resolve_category(filters)
        if not resolved:
            return ListPage()

        conditions = self._conditions(filters, category_id)
        items: list[Article] = []
        while True:
            # never evaluate more than the page still needs so the cursor lands exactly after the last item
            remaining = page_size - len(items)
            found, start_key = await self.articles.scan(conditions, limit=remaining, start_key=start_key)
            items.extend(a for a in found if self._matches_text(a, filters))
            if not start_key or len(items) >= page_size:
                break

        if filters.sort_by:
            items.sort(key=SORT_KEYS[filters.sort_by], reverse=True)
        return ListPage(items=items, cursor=encode_cursor(start_key))

    async def get_article(self, article_id: str, with_comments: bool = True) -> Article:
        article = await self.articles.get_by_id(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        if with_comments:
            article.comments = await self.comments.find_by_article(article.id)
        return article

    async def get_by_slug(self, slug: str, with_comments: bool = True) -> Article:
        article = await self.articles.find_by_slug(slug)
        if article is None:
            raise NotFoundError("Article not found")
        if with_comments:
            article.comments = await self.comments.find_by_article(article.id)
        return article

    async def unique_slug(self, base: str, exclude_id: Optional[str] = None) -> str:
        candidate = base
        n = 2
        while True:
            existing = await self.articles.find_by_slug(candidate)
            if existing is None or existing.id == exclude_id:
                return candidate
            candidate = f"{base}-{n}"
            n += 1

    def _normalize_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        if "status" in fields:
            fields["status"] = normalize_status(fields["status"])
        if "tags" in fields:
            fields["tags"] = normalize_tags(fields["tags"])
        if fields.get("published_at"):
            fields["published_at"] = _iso_or_error(fields["published_at"])
        return fields

    async def create_article(self, data: dict[str, Any], principal: Principal) -> Article:
        fields = self._normalize_fields({k: v for k, v in data.items() if v is not None})
        title = (fields.get("title") or "").strip()
        if not title:
            raise ValidationError("title is required")
        fields["title"] = title
        fields["slug"] = await self.unique_slug(slugify(fields.get("slug") or title))
        fields.setdefault("author_id", principal.user_id)
        fields["views"] = 0
        if fields.get("status") == ArticleStatus.PUBLISHED and not fields.get("published_at"):
            fields["published_at"] = utc_now_iso()

        article = Article.create(**fields)
        await self.articles.create(article)
        logger.info("article_created", article_id=article.id, status=article.status.value, author_id=article.author_id)
        return await self.get_article(article.id, with_comments=False)

    async def update_article(self, article_id: str, data: dict[str, Any]) -> Article:
        existing = await self.articles.get_by_id(article_id)
        if existing is None:
            raise NotFoundError("Article not found")

        fields = self._normalize_fields(dict(data))
        for key in ("id", "views", "created_at", "updated_at", "comments"):
            fields.pop(key, None)
        if "title" in fields and not (fields["title"] or "").strip():
            raise ValidationError("title cannot be empty")
        if fields.get("slug"):
            fields["slug"] = await self.unique_slug(slugify(fields["slug"]), exclude_id=article_id)
        elif "slug" in fields:
            fields.pop("slug")

        status = fields.get("status", existing.status)
        if status == ArticleStatus.PUBLISHED and not (fields.get("published_at") or existing.published_at):
            fields["published_at"] = utc_now_iso()

        updated = await self.articles.update(article_id, fields)
        if updated is None:
            raise NotFoundError("Article not found")
        logger.info("article_updated", article_id=article_id, fields=sorted(fields))
        return updated

    async def update_status(
        self,
        article_id: str,
        raw_status: Any,
        principal: Principal,
        reason: Optional[str] = None,
        published_at: Optional[str] = None,
    ) -> Article:
        if raw_status is None or raw_status == "":
            raise ValidationError("status is required")
        target = parse_status(raw_status)
        reason = (reason or "").strip()
        if target == ArticleStatus.REJECTED and not reason:
            raise ValidationError("A rejection reason is required")

        article = await self.articles.get_by_id(article_id)
        if article is None:
            raise NotFoundError("Article not found")

        validate_transition(article.status, target, principal.role)
        if principal.role == UserRole.AUTHOR and article.author_id != principal.user_id:
            raise ForbiddenError("Authors can only submit their own articles")

        fields: dict[str, Any] = {"status": target}
        if target == ArticleStatus.PUBLISHED:
            fields["published_at"] = _iso_or_error(published_at) if published_at else utc_now_iso()
        elif target == ArticleStatus.REJECTED:
            fields["rejection_reason"] = reason
        elif target == ArticleStatus.DRAFT:
            fields["published_at"] = None
        if target != ArticleStatus.REJECTED:
            fields["rejection_reason"] = None

        updated = await self.articles.update(article_id, fields)
        if updated is None:
            raise NotFoundError("Article not found")
        logger.info(
            "article_status_changed",
            article_id=article_id,
            from_status=article.status.value,
            to_status=target.value,
            user_id=principal.user_id,
        )

        if updated.author_id and target == ArticleStatus.PUBLISHED:
            await notify(
                self.notifications,
                updated.author_id,
                f'Your article "{updated.title}" has been published.',
                NotificationType.APPROVED,
                article_id=updated.id,
            )
        elif updated.author_id and target == ArticleStatus.REJECTED:
            await notify(
                self.notifications,
                updated.author_id,
                f'Your article "{updated.title}" was rejected: {reason}',
                NotificationType.REJECTED,
                article_id=updated.id,
            )
        return updated

    async def delete_article(self, article_id: str) -> None:
        if not await self.articles.delete(article_id):
            raise NotFoundError("Article not found")
        comments = await self.comments.find_by_article(article_id, approved_only=False)
        for comment in comments:
            await self.comments.delete(comment.id)
        logger.info("article_deleted", article_id=article_id, comments_deleted=len(comments))

    async def set_featured(self, updates: list[dict[str, Any]]) -> None:
        for update in updates:
            article_id = update.get("articleId")
            is_featured = update.get("isFeatured")
            if not isinstance(article_id, str) or not isinstance(is_featured, bool):
                raise ValidationError("Invalid update format")
        for update in updates:
            result = await self.articles.update(update["articleId"], {"is_featured": update["isFeatured"]})
            if result is None:
                logger.warning("featured_update_missing_article", article_id=update["articleId"])

    async def increment_views(self, article_id: str, amount: int = 1) -> int:
        views = await self.articles.increment_views(article_id, amount)
        logger.debug("article_viewed", article_id=article_id, views=views)
        return views

    async def tag_counts(self) -> list[dict[str, Any]]:
        counts: Counter[str] = Counter()
        for article in await self.articles.scan_all():
            for tag in article.tags:
                counts[tag.strip().lower()] += 1
        # most_common keeps first-seen order for ties
        return [{"name": name, "count": count} for name, count in counts.most_common() if name]


def _iso_or_error(value: str) -> str:
    try:
        return to_iso(parse_iso(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid timestamp: {value!r}")
