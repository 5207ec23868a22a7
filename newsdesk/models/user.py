from __future__ import annotations

from typing import Any, ClassVar, Optional
from urllib.parse import quote_plus

from newsdesk.models.base import DocumentModel
from newsdesk.models.enums import UserRole

PRIVATE_FIELDS = {"password", "refreshToken"}


def default_avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote_plus(name)}"


class User(DocumentModel):
    id_prefix: ClassVar[str] = "u"

    id: str
    name: str
    email: str
    password: Optional[str] = None
    role: UserRole = UserRole.AUTHOR
    avatar_url: str = ""
    bio: str = ""
    refresh_token: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def public(self) -> dict[str, Any]:
        data = self.to_api()
        for key in PRIVATE_FIELDS:
            data.pop(key, None)
        return data
