from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from newsdesk.api.deps import get_user_service
from newsdesk.api.schemas import UserCreate, UserUpdate
from newsdesk.core.security import ADMINS, Principal, require_roles
from newsdesk.services.articles import ListPage
from newsdesk.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(
    principal: Principal = Depends(require_roles(*ADMINS)),
    service: UserService = Depends(get_user_service),
):
    return ListPage(items=await service.list_users()).to_api(lambda u: u.public())


@router.get("/{user_id}")
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return (await service.get_user(user_id)).public()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    principal: Principal = Depends(require_roles(*ADMINS)),
    service: UserService = Depends(get_user_service),
):
    return await service.create_user(payload.model_dump(exclude_unset=True))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    principal: Principal = Depends(require_roles()),
    service: UserService = Depends(get_user_service),
):
    return (await service.update_user(principal, user_id, payload.model_dump(exclude_unset=True))).public()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    principal: Principal = Depends(require_roles(*ADMINS)),
    service: UserService = Depends(get_user_service),
):
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
