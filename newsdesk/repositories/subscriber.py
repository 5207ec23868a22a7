from __future__ import annotations

from typing import Optional

from newsdesk.core.config import Settings
from newsdesk.models import Subscriber
from newsdesk.models.base import utc_now_iso
from newsdesk.repositories.base import BaseRepository
from newsdesk.store.base import DocumentStore, eq


class SubscriberRepository(BaseRepository[Subscriber]):
    model = Subscriber

    def __init__(self, store: DocumentStore, settings: Settings):
        super().__init__(store, settings.subscribers_table)
        self.email_index = settings.subscribers_email_index

    async def find_by_email(self, email: str, include_inactive: bool = False) -> Optional[Subscriber]:
        conditions = [] if include_inactive else [eq("isActive", True)]
        return await self.query_first(self.email_index, "email", email, conditions)

    async def unsubscribe(self, email: str) -> bool:
        subscriber = await self.find_by_email(email)
        if subscriber is None:
            return False
        await self.update(subscriber.id, {"is_active": False, "unsubscribed_at": utc_now_iso()})
        return True

    async def get_active_subscribers(self) -> list[Subscriber]:
        return await self.scan_all([eq("isActive", True)])
