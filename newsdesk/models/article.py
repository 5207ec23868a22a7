from __future__ import annotations

from typing import Any, ClassVar, Optional

from pydantic import Field, field_validator

from newsdesk.models.base import DocumentModel
from newsdesk.models.comment import Comment
from newsdesk.models.enums import ArticleStatus


class Article(DocumentModel):
    id_prefix: ClassVar[str] = "a"

    id: str
    title: str
    slug: str
    summary: str = ""
    content: str = ""
    cover_image_url: str = ""
    image_urls: list[str] = Field(default_factory=list)
    video_url: Optional[str] = None

    category_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    author_id: Optional[str] = None

    status: ArticleStatus = ArticleStatus.DRAFT
    published_at: Optional[str] = None
    rejection_reason: Optional[str] = None

    is_advertisement: bool = False
    is_featured: bool = False

    views: int = Field(default=0, ge=0)

    comments: list[Comment] = Field(default_factory=list)

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> ArticleStatus:
        from newsdesk.services.status import normalize_status

        return normalize_status(value)

    @field_validator("tags", "image_urls", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list:
        if value is None:
            return []
        if isinstance(value, (set, tuple)):
            return list(value)
        return value

    def has_tag(self, tag: str) -> bool:
        wanted = tag.strip().lower()
        return any(t.lower() == wanted for t in self.tags)


def article_date(article: Article) -> Optional[str]:
    return article.published_at or article.updated_at or article.created_at
