from __future__ import annotations

from typing import Optional

from newsdesk.core.config import Settings
from newsdesk.models import User
from newsdesk.repositories.base import BaseRepository
from newsdesk.store.base import DocumentStore, eq


class UserRepository(BaseRepository[User]):
    model = User

    def __init__(self, store: DocumentStore, settings: Settings):
        super().__init__(store, settings.users_table)
        self.email_index = settings.users_email_index

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.query_first(self.email_index, "email", email)

    async def find_by_refresh_token(self, refresh_token: str) -> Optional[User]:
        users = await self.scan_all([eq("refreshToken", refresh_token)])
        return users[0] if users else None

    async def find_all(self) -> list[User]:
        return await self.scan_all()

    async def update_refresh_token(self, user_id: str, refresh_token: Optional[str]) -> Optional[User]:
        return await self.update(user_id, {"refresh_token": refresh_token})

    async def count(self) -> int:
        return len(await self.scan_all())
