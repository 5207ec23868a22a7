from __future__ import annotations

from typing import Any, ClassVar, Optional

from pydantic import Field

from newsdesk.models.base import DocumentModel, utc_now_iso


class Subscriber(DocumentModel):
    id_prefix: ClassVar[str] = "s"

    id: str
    email: str
    name: Optional[str] = None
    is_active: bool = True
    subscribed_at: str = Field(default_factory=utc_now_iso)
    unsubscribed_at: Optional[str] = None
    preferences: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
