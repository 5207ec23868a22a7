from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from newsdesk.api.deps import get_category_service
from newsdesk.api.schemas import CategoryCreate, CategoryUpdate
from newsdesk.core.security import ADMINS, Principal, require_roles
from newsdesk.services.articles import ListPage
from newsdesk.services.categories import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(
    show_in_header: Optional[bool] = Query(default=None, alias="showInHeader"),
    service: CategoryService = Depends(get_category_service),
):
    return ListPage(items=await service.list_categories(show_in_header)).to_api()


@router.get("/{category_id}")
async def get_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    return (await service.get_category(category_id)).to_api()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    principal: Principal = Depends(require_roles(*ADMINS)),
    service: CategoryService = Depends(get_category_service),
):
    return (await service.create_category(payload.model_dump(exclude_unset=True))).to_api()


@router.put("/{category_id}")
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    principal: Principal = Depends(require_roles(*ADMINS)),
    service: CategoryService = Depends(get_category_service),
):
    return (await service.update_category(category_id, payload.model_dump(exclude_unset=True))).to_api()


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    principal: Principal = Depends(require_roles(*ADMINS)),
    service: CategoryService = Depends(get_category_service),
):
    await service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
