from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from newsdesk.api.deps import get_comment_service
from newsdesk.api.schemas import CommentCreate, CommentStatusUpdate
from newsdesk.core.security import EDITORS, Principal, require_roles
from newsdesk.services.articles import ListPage
from newsdesk.services.comments import CommentService

router = APIRouter(tags=["comments"])


@router.post("/articles/{article_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(article_id: str, payload: CommentCreate, service: CommentService = Depends(get_comment_service)):
    comment = await service.add_comment(article_id, payload.text)
    return comment.to_api()


@router.api_route("/articles/{article_id}/comments/{comment_id}", methods=["PATCH", "PUT"])
@router.api_route("/articles/{article_id}/comments/{comment_id}/status", methods=["PATCH", "PUT"])
async def moderate_comment(
    article_id: str,
    comment_id: str,
    payload: CommentStatusUpdate,
    principal: Principal = Depends(require_roles(*EDITORS)),
    service: CommentService = Depends(get_comment_service),
):
    await service.set_status(article_id, comment_id, payload.status)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/comments/pending")
async def pending_comments(
    principal: Principal = Depends(require_roles(*EDITORS)),
    service: CommentService = Depends(get_comment_service),
):
    return ListPage(items=await service.pending_with_articles()).to_api(lambda c: c)
