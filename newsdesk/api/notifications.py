from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from newsdesk.api.deps import get_notification_repository
from newsdesk.core.security import Principal, require_roles
from newsdesk.repositories import NotificationRepository
from newsdesk.services import notifications
from newsdesk.services.articles import ListPage

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/user/{user_id}")
async def list_notifications(
    user_id: str,
    principal: Principal = Depends(require_roles()),
    repo: NotificationRepository = Depends(get_notification_repository),
):
    return ListPage(items=await notifications.list_for_user(repo, principal, user_id)).to_api()


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: str,
    principal: Principal = Depends(require_roles()),
    repo: NotificationRepository = Depends(get_notification_repository),
):
    await notifications.mark_read(repo, principal, notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/user/{user_id}/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_read(
    user_id: str,
    principal: Principal = Depends(require_roles()),
    repo: NotificationRepository = Depends(get_notification_repository),
):
    await notifications.mark_all_read(repo, principal, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
