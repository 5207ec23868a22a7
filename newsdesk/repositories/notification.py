from __future__ import annotations

from typing import Optional

from newsdesk.core.config import Settings
from newsdesk.models import Notification
from newsdesk.repositories.base import BaseRepository
from newsdesk.store.base import DocumentStore, eq


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    def __init__(self, store: DocumentStore, settings: Settings):
        super().__init__(store, settings.notifications_table)
        self.user_index = settings.notifications_user_index

    async def find_by_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        conditions = [eq("read", False)] if unread_only else []
        notifications = await self.query_all(self.user_index, "userId", user_id, conditions)
        notifications.sort(key=lambda n: n.timestamp, reverse=True)
        return notifications

    async def mark_as_read(self, notification_id: str) -> Optional[Notification]:
        existing = await self.get_by_id(notification_id)
        if existing is None:
            return None
        existing.read = True
        return await self.save(existing)

    async def mark_all_as_read(self, user_id: str) -> int:
        unread = await self.find_by_user(user_id, unread_only=True)
        for notification in unread:
            notification.read = True
            await self.save(notification)
        return len(unread)
