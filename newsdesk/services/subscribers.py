from __future__ import annotations

from typing import Any, Optional

import structlog

from newsdesk.core.config import Settings
from newsdesk.core.errors import ConflictError, NotFoundError, ValidationError
from newsdesk.models import Subscriber
from newsdesk.models.base import utc_now_iso
from newsdesk.repositories import SubscriberRepository
from newsdesk.services.normalize import is_valid_email, normalize_email
from newsdesk.store.base import DocumentStore

logger = structlog.get_logger()


class SubscriberService:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.subscribers = SubscriberRepository(store, settings)

    async def list_active(self) -> list[Subscriber]:
        return await self.subscribers.get_active_subscribers()

    async def subscribe(
        self, email: Optional[str], name: Optional[str] = None, preferences: Optional[dict[str, Any]] = None
    ) -> Subscriber:
        email = normalize_email(email)
        if not email or not is_valid_email(email):
            raise ValidationError("A valid email address is required")

        existing = await self.subscribers.find_by_email(email, include_inactive=True)
        if existing and existing.is_active:
            raise ConflictError("Subscriber already exists")
        if existing:
            fields: dict[str, Any] = {"is_active": True, "subscribed_at": utc_now_iso(), "unsubscribed_at": None}
            if name:
                fields["name"] = name
            if preferences is not None:
                fields["preferences"] = preferences
            subscriber = await self.subscribers.update(existing.id, fields)
            logger.info("subscriber_reactivated", subscriber_id=existing.id)
            return subscriber

        subscriber = Subscriber.create(email=email, name=name, preferences=preferences or {})
        subscriber = await self.subscribers.create(subscriber)
        logger.info("subscriber_created", subscriber_id=subscriber.id)
        return subscriber

    async def unsubscribe(self, email: Optional[str]) -> None:
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        if not await self.subscribers.unsubscribe(email):
            raise NotFoundError("Subscriber not found")
        logger.info("subscriber_unsubscribed")
