from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from newsdesk.api.deps import get_article_service
from newsdesk.api.schemas import ArticleCreate, ArticleUpdate, FeaturedUpdate, StatusUpdate
from newsdesk.core.security import EDITORS, STAFF, Principal, require_roles
from newsdesk.services.articles import ArticleFilters, ArticleService

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("")
async def list_articles(
    category: Optional[str] = Query(default=None),
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
    category_slug: Optional[str] = Query(default=None, alias="categorySlug"),
    tag: Optional[str] = Query(default=None),
    author_id: Optional[str] = Query(default=None, alias="authorId"),
    query: Optional[str] = Query(default=None),
    article_status: Optional[str] = Query(default=None, alias="status"),
    featured: Optional[bool] = Query(default=None),
    is_advertisement: Optional[bool] = Query(default=None, alias="isAdvertisement"),
    limit: Optional[int] = Query(default=None, ge=1),
    cursor: Optional[str] = Query(default=None),
    last_evaluated_key: Optional[str] = Query(default=None, alias="lastEvaluatedKey"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    service: ArticleService = Depends(get_article_service),
):
    filters = ArticleFilters(
        category=category,
        category_id=category_id,
        category_slug=category_slug,
        tag=tag,
        author_id=author_id,
        query=query,
        status=article_status,
        featured=featured,
        is_advertisement=is_advertisement,
        limit=limit,
        cursor=cursor or last_evaluated_key,
        sort_by=sort_by,
    )
    page = await service.list_articles(filters)
    return page.to_api()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_article(
    payload: ArticleCreate,
    principal: Principal = Depends(require_roles(*STAFF)),
    service: ArticleService = Depends(get_article_service),
):
    article = await service.create_article(payload.model_dump(exclude_unset=True), principal)
    return article.to_api()


@router.post("/featured", status_code=status.HTTP_204_NO_CONTENT)
async def update_featured(
    payload: FeaturedUpdate,
    principal: Principal = Depends(require_roles(*EDITORS)),
    service: ArticleService = Depends(get_article_service),
):
    await service.set_featured([u.model_dump(by_alias=True) for u in payload.updates])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/slug/{slug}")
async def get_article_by_slug(slug: str, service: ArticleService = Depends(get_article_service)):
    return (await service.get_by_slug(slug)).to_api()


@router.get("/id/{article_id}")
@router.get("/{article_id}")
async def get_article(article_id: str, service: ArticleService = Depends(get_article_service)):
    return (await service.get_article(article_id)).to_api()


@router.put("/{article_id}")
async def update_article(
    article_id: str,
    payload: ArticleUpdate,
    principal: Principal = Depends(require_roles(*STAFF)),
    service: ArticleService = Depends(get_article_service),
):
    article = await service.update_article(article_id, payload.model_dump(exclude_unset=True))
    return article.to_api()


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: str,
    principal: Principal = Depends(require_roles(*STAFF)),
    service: ArticleService = Depends(get_article_service),
):
    await service.delete_article(article_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.api_route("/{article_id}/status", methods=["PATCH", "PUT"])
async def update_article_status(
    article_id: str,
    payload: StatusUpdate,
    principal: Principal = Depends(require_roles(*STAFF)),
    service: ArticleService = Depends(get_article_service),
):
    article = await service.update_status(
        article_id,
        payload.status,
        principal,
        reason=payload.reason,
        published_at=payload.published_at,
    )
    return article.to_api()


@router.post("/{article_id}/views")
async def record_view(article_id: str, service: ArticleService = Depends(get_article_service)):
    views = await service.increment_views(article_id)
    return {"id": article_id, "views": views}
