from __future__ import annotations

from typing import ClassVar, Optional

from pydantic import Field

from newsdesk.models.base import DocumentModel, utc_now_iso
from newsdesk.models.enums import CommentStatus

ANONYMOUS_AUTHOR = "Anonymous User"


class Comment(DocumentModel):
    id_prefix: ClassVar[str] = "cm"

    id: str
    article_id: str
    author_name: str = ANONYMOUS_AUTHOR
    author_email: str = ""
    author_avatar_url: str = ""
    text: str
    status: CommentStatus = CommentStatus.PENDING
    date: str = Field(default_factory=utc_now_iso)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
