from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from newsdesk.api.deps import get_article_service, get_settings
from newsdesk.core.config import Settings
from newsdesk.core.errors import NotFoundError
from newsdesk.models import ArticleStatus
from newsdesk.services.articles import ArticleService
from newsdesk.services.share import render_share_page

router = APIRouter(prefix="/share", tags=["share"])


@router.get("/article/{slug}", response_class=HTMLResponse)
async def share_article(
    slug: str,
    service: ArticleService = Depends(get_article_service),
    settings: Settings = Depends(get_settings),
):
    article = await service.get_by_slug(slug, with_comments=False)
    if article.status != ArticleStatus.PUBLISHED:
        raise NotFoundError("Article not found")
    return HTMLResponse(render_share_page(article, settings))
