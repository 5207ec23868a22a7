from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from newsdesk.api.deps import get_article_service, get_settings, get_subscriber_service
from newsdesk.api.schemas import ContactRequest, SubscribeRequest, UnsubscribeRequest, UploadUrlRequest
from newsdesk.core.config import Settings
from newsdesk.core.security import ADMINS, STAFF, Principal, require_roles
from newsdesk.services.articles import ArticleService, ListPage
from newsdesk.services.subscribers import SubscriberService
from newsdesk.services.uploads import generate_upload_url

logger = structlog.get_logger()

router = APIRouter(tags=["misc"])


@router.get("/tags")
async def list_tags(service: ArticleService = Depends(get_article_service)):
    return ListPage(items=await service.tag_counts()).to_api(lambda t: t)


@router.get("/subscribers")
async def list_subscribers(
    principal: Principal = Depends(require_roles(*ADMINS)),
    service: SubscriberService = Depends(get_subscriber_service),
):
    return ListPage(items=await service.list_active()).to_api()


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
async def subscribe(payload: SubscribeRequest, service: SubscriberService = Depends(get_subscriber_service)):
    subscriber = await service.subscribe(payload.email, payload.name, payload.preferences)
    return subscriber.to_api()


@router.post("/unsubscribe", status_code=status.HTTP_204_NO_CONTENT)
async def unsubscribe(payload: UnsubscribeRequest, service: SubscriberService = Depends(get_subscriber_service)):
    await service.unsubscribe(payload.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/contact", status_code=status.HTTP_204_NO_CONTENT)
async def contact(payload: ContactRequest):
    logger.info("contact_form_submitted", form=payload.model_dump(exclude_none=True))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/upload-url")
async def upload_url(
    payload: UploadUrlRequest,
    request: Request,
    principal: Principal = Depends(require_roles(*STAFF)),
    settings: Settings = Depends(get_settings),
):
    client = getattr(request.app.state, "s3_client", None)
    return generate_upload_url(settings, payload.file_name, payload.content_type, client=client)
