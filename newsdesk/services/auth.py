from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any, Optional

import structlog

from newsdesk.core.config import Settings
from newsdesk.core.errors import AuthError, ConflictError, UpstreamError, ValidationError
from newsdesk.core.security import (
    Principal,
    create_access_token,
    hash_password,
    new_refresh_token,
    verify_password,
)
from newsdesk.models import User, UserRole, default_avatar_url
from newsdesk.repositories import UserRepository
from newsdesk.services.normalize import is_valid_email, normalize_email
from newsdesk.store.base import DocumentStore

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password"


def temporary_password() -> str:
    return uuid.uuid4().hex[:8]


def load_fallback_users(path: Optional[str]) -> list[User]:
    if not path:
        return []
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return [User.model_validate(item) for item in raw]


class AuthService:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.settings = settings
        self.users = UserRepository(store, settings)

    def _auth_response(self, user: User, refresh_token: str) -> dict[str, Any]:
        return {
            "user": user.public(),
            "token": create_access_token(user, self.settings),
            "refreshToken": refresh_token,
        }

    async def _lookup(self, email: str) -> Optional[User]:
        user = await self.users.find_by_email(email)
        if user is None and email.lower() != email:
            user = await self.users.find_by_email(email.lower())
        return user

    def _fallback_lookup(self, email: str) -> Optional[User]:
        for user in load_fallback_users(self.settings.fallback_users_file):
            if user.email.lower() == email.lower():
                return user
        return None

    async def login(self, email: Optional[str], password: Optional[str]) -> dict[str, Any]:
        if not email or not password:
            raise ValidationError("Email and password are required")
        email = email.strip()

        from_fallback = False
        try:
            user = await self._lookup(email)
        except UpstreamError as e:
            if not self.settings.fallback_users_file:
                raise
            logger.error("login_lookup_failed_using_fallback", error=e.message)
            user = self._fallback_lookup(email)
            from_fallback = True

        if user is None or not verify_password(password, user.password):
            logger.info("login_failed", email=email)
            raise AuthError(INVALID_CREDENTIALS)

        refresh_token = new_refresh_token()
        if not from_fallback:
            try:
                await self.users.update_refresh_token(user.id, refresh_token)
            except UpstreamError as e:
                logger.error("refresh_token_persist_failed", user_id=user.id, error=e.message)
        logger.info("login_succeeded", user_id=user.id, role=user.role.value)
        return self._auth_response(user, refresh_token)

    async def register(self, name: Optional[str], email: Optional[str], password: Optional[str] = None) -> dict[str, Any]:
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email:
            raise ValidationError("Name and email are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")
        if await self.users.find_by_email(email):
            raise ConflictError("User with this email already exists")

        is_first_user = await self.users.count() == 0
        generated = not (password and password.strip())
        plain = temporary_password() if generated else password.strip()
        user = User.create(
            name=name,
            email=email,
            password=hash_password(plain, self.settings.bcrypt_rounds),
            role=UserRole.ADMIN if is_first_user else UserRole.AUTHOR,
            avatar_url=default_avatar_url(name),
        )
        user = await self.users.create(user)
        logger.info("user_registered", user_id=user.id, role=user.role.value)

        body = user.public()
        if generated:
            body["temporaryPassword"] = plain
        return body

    async def refresh(self, refresh_token: Optional[str]) -> dict[str, Any]:
        if not refresh_token:
            raise ValidationError("refreshToken is required")
        user = await self.users.find_by_refresh_token(refresh_token)
        if user is None:
            raise AuthError("Invalid refresh token")
        rotated = new_refresh_token()
        await self.users.update_refresh_token(user.id, rotated)
        logger.info("token_refreshed", user_id=user.id)
        return self._auth_response(user, rotated)

    async def logout(self, principal: Principal) -> None:
        await self.users.update_refresh_token(principal.user_id, None)
        logger.info("user_logged_out", user_id=principal.user_id)
