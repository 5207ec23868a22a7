from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from newsdesk.api.deps import get_auth_service
from newsdesk.api.schemas import LoginRequest, RefreshRequest, RegisterRequest
from newsdesk.core.security import Principal, require_roles
from newsdesk.services.auth import AuthService

router = APIRouter(tags=["auth"])


@router.post("/login")
@router.post("/auth/login")
async def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return await service.login(payload.email, payload.password)


@router.post("/register", status_code=status.HTTP_201_CREATED)
@router.post("/auth/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    return await service.register(payload.name, payload.email, payload.password)


@router.post("/auth/refresh")
async def refresh(payload: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    return await service.refresh(payload.refresh_token)


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    principal: Principal = Depends(require_roles()),
    service: AuthService = Depends(get_auth_service),
):
    await service.logout(principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
