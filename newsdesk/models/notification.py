from __future__ import annotations

from typing import ClassVar, Optional

from pydantic import Field

from newsdesk.models.base import DocumentModel, new_id, utc_now_iso
from newsdesk.models.enums import NotificationType


class Notification(DocumentModel):
    id_prefix: ClassVar[str] = "n"

    id: str
    user_id: str
    article_id: Optional[str] = None
    message: str
    type: NotificationType = NotificationType.GENERAL
    read: bool = False
    timestamp: str = Field(default_factory=utc_now_iso)

    @classmethod
    def create(cls, **data):
        data.setdefault("id", new_id(cls.id_prefix))
        return cls(**data)
