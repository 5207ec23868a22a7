from __future__ import annotations

from typing import Any, Optional

import structlog

from newsdesk.core.config import Settings
from newsdesk.core.errors import NotFoundError, ValidationError
from newsdesk.models import ANONYMOUS_AUTHOR, Comment, CommentStatus, NotificationType
from newsdesk.repositories import ArticleRepository, CommentRepository, NotificationRepository
from newsdesk.services.notifications import notify
from newsdesk.store.base import DocumentStore

logger = structlog.get_logger()


class CommentService:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.comments = CommentRepository(store, settings)
        self.articles = ArticleRepository(store, settings)
        self.notifications = NotificationRepository(store, settings)

    async def add_comment(self, article_id: str, text: Optional[str]) -> Comment:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Comment text is required")
        article = await self.articles.get_by_id(article_id)
        if article is None:
            raise NotFoundError("Article not found")

        # moderation queue: public comments are always anonymous and pending
        comment = Comment.create(
            article_id=article_id,
            text=text,
            author_name=ANONYMOUS_AUTHOR,
            status=CommentStatus.PENDING,
        )
        comment = await self.comments.create(comment)
        logger.info("comment_added", article_id=article_id, comment_id=comment.id)

        if article.author_id:
            await notify(
                self.notifications,
                article.author_id,
                f'New comment on "{article.title}" is awaiting moderation.',
                NotificationType.COMMENT,
                article_id=article_id,
            )
        return comment

    async def set_status(self, article_id: str, comment_id: str, status: Any) -> Comment:
        try:
            target = CommentStatus(str(status).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown comment status: {status!r}")
        comment = await self.comments.get_by_id(comment_id)
        if comment is None or comment.article_id != article_id:
            raise NotFoundError("Comment not found")
        updated = await self.comments.update(comment_id, {"status": target})
        if updated is None:
            raise NotFoundError("Comment not found")
        logger.info("comment_moderated", comment_id=comment_id, status=target.value)
        return updated

    async def pending_with_articles(self) -> list[dict[str, Any]]:
        pending = await self.comments.find_by_status(CommentStatus.PENDING)
        titles: dict[str, Any] = {}
        out = []
        for comment in pending:
            if comment.article_id not in titles:
                titles[comment.article_id] = await self.articles.get_by_id(comment.article_id)
            article = titles[comment.article_id]
            body = comment.to_api()
            body["article"] = (
                {"id": article.id, "title": article.title, "slug": article.slug} if article else None
            )
            out.append(body)
        return out
