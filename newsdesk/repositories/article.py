from __future__ import annotations

from typing import Any, Optional

from newsdesk.core.config import Settings
from newsdesk.models import Article, ArticleStatus
from newsdesk.repositories.base import BaseRepository
from newsdesk.store.base import DocumentStore, eq


class ArticleRepository(BaseRepository[Article]):
    model = Article

    def __init__(self, store: DocumentStore, settings: Settings):
        super().__init__(store, settings.articles_table)
        self.slug_index = settings.articles_slug_index

    def to_db(self, article: Article) -> dict[str, Any]:
        record = article.to_record()
        record.pop("comments", None)
        # the publishedAt index needs a consistent type: only published articles carry it
        if article.status != ArticleStatus.PUBLISHED:
            record.pop("publishedAt", None)
        if article.status != ArticleStatus.REJECTED:
            record.pop("rejectionReason", None)
        return record

    async def find_by_slug(self, slug: str) -> Optional[Article]:
        return await self.query_first(self.slug_index, "slug", slug)

    async def slug_exists(self, slug: str) -> bool:
        return await self.find_by_slug(slug) is not None

    async def find_by_author(self, author_id: str) -> list[Article]:
        return await self.scan_all([eq("authorId", author_id)])

    async def find_by_status(self, status: ArticleStatus) -> list[Article]:
        return await self.scan_all([eq("status", status.value)])

    async def find_by_category(self, category_id: str, limit: Optional[int] = None) -> list[Article]:
        if limit is None:
            return await self.scan_all([eq("categoryId", category_id)])
        found: list[Article] = []
        start_key = None
        while len(found) < limit:
            page, start_key = await self.scan([eq("categoryId", category_id)], limit=limit, start_key=start_key)
            found.extend(page)
            if not start_key:
                break
        return found[:limit]

    async def increment_views(self, article_id: str, amount: int = 1) -> int:
        return await self.store.increment(self.table_name, article_id, "views", amount)
