from __future__ import annotations

from typing import Optional

import structlog

from newsdesk.core.errors import ForbiddenError, NotFoundError, UpstreamError
from newsdesk.core.security import Principal
from newsdesk.models import Notification, NotificationType
from newsdesk.repositories import NotificationRepository

logger = structlog.get_logger()


async def notify(
    repo: NotificationRepository,
    user_id: str,
    message: str,
    type: NotificationType = NotificationType.GENERAL,
    article_id: Optional[str] = None,
) -> Optional[Notification]:
    """Record a notification. Store failures are logged and return None; the caller's write already happened."""
    notification = Notification.create(user_id=user_id, message=message, type=type, article_id=article_id)
    try:
        await repo.create(notification)
    except UpstreamError as e:
        logger.error(
            "notification_write_failed", user_id=user_id, type=type.value, article_id=article_id, error=e.message
        )
        return None
    logger.info("notification_created", user_id=user_id, type=type.value, article_id=article_id)
    return notification


def ensure_self_or_admin(principal: Principal, user_id: str) -> None:
    if not principal.is_admin and principal.user_id != user_id:
        raise ForbiddenError()


async def list_for_user(repo: NotificationRepository, principal: Principal, user_id: str) -> list[Notification]:
    ensure_self_or_admin(principal, user_id)
    return await repo.find_by_user(user_id)


async def mark_read(repo: NotificationRepository, principal: Principal, notification_id: str) -> None:
    notification = await repo.get_by_id(notification_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    ensure_self_or_admin(principal, notification.user_id)
    await repo.mark_as_read(notification_id)


async def mark_all_read(repo: NotificationRepository, principal: Principal, user_id: str) -> int:
    ensure_self_or_admin(principal, user_id)
    count = await repo.mark_all_as_read(user_id)
    logger.info("notifications_marked_read", user_id=user_id, count=count)
    return count
