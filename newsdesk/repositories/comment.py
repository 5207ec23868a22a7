from __future__ import annotations

from newsdesk.core.config import Settings
from newsdesk.models import Comment, CommentStatus
from newsdesk.repositories.base import BaseRepository
from newsdesk.store.base import DocumentStore, eq


class CommentRepository(BaseRepository[Comment]):
    model = Comment

    def __init__(self, store: DocumentStore, settings: Settings):
        super().__init__(store, settings.comments_table)
        self.article_index = settings.comments_article_index
        self.status_index = settings.comments_status_index

    async def find_by_article(self, article_id: str, approved_only: bool = True) -> list[Comment]:
        conditions = [eq("status", CommentStatus.APPROVED.value)] if approved_only else []
        return await self.query_all(self.article_index, "articleId", article_id, conditions)

    async def find_by_status(self, status: CommentStatus) -> list[Comment]:
        return await self.query_all(self.status_index, "status", status.value)
