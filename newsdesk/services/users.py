from __future__ import annotations

from typing import Any

import structlog

from newsdesk.core.config import Settings
from newsdesk.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from newsdesk.core.security import Principal, hash_password
from newsdesk.models import User, UserRole, default_avatar_url
from newsdesk.repositories import UserRepository
from newsdesk.services.auth import temporary_password
from newsdesk.services.normalize import is_valid_email, normalize_email
from newsdesk.store.base import DocumentStore

logger = structlog.get_logger()


class UserService:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.settings = settings
        self.users = UserRepository(store, settings)

    async def list_users(self) -> list[User]:
        return await self.users.find_all()

    async def get_user(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _admin_count(self) -> int:
        return sum(1 for u in await self.users.find_all() if u.role == UserRole.ADMIN)

    async def create_user(self, data: dict[str, Any]) -> dict[str, Any]:
        name = (data.get("name") or "").strip()
        email = normalize_email(data.get("email"))
        if not name or not email:
            raise ValidationError("Name and email are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")
        if await self.users.find_by_email(email):
            raise ConflictError("User with this email already exists")

        password = (data.get("password") or "").strip()
        generated = not password
        plain = temporary_password() if generated else password
        user = User.create(
            name=name,
            email=email,
            password=hash_password(plain, self.settings.bcrypt_rounds),
            role=data.get("role") or UserRole.AUTHOR,
            avatar_url=data.get("avatar_url") or default_avatar_url(name),
            bio=data.get("bio") or "",
        )
        user = await self.users.create(user)
        logger.info("user_created", user_id=user.id, role=user.role.value)

        body = user.public()
        if generated:
            body["temporaryPassword"] = plain
        return body

    async def update_user(self, principal: Principal, user_id: str, data: dict[str, Any]) -> User:
        if not principal.is_admin and principal.user_id != user_id:
            raise ForbiddenError("You can only update your own profile")
        existing = await self.get_user(user_id)

        fields = dict(data)
        for key in ("id", "created_at", "updated_at", "refresh_token"):
            fields.pop(key, None)

        role = fields.get("role")
        if role is not None and role != existing.role:
            if not principal.is_admin:
                raise ForbiddenError("Only administrators can change roles")
            if existing.role == UserRole.ADMIN and await self._admin_count() <= 1:
                raise ValidationError("Cannot demote the last admin")

        if "email" in fields:
            email = normalize_email(fields["email"])
            if not is_valid_email(email):
                raise ValidationError("Invalid email address")
            if email != existing.email:
                other = await self.users.find_by_email(email)
                if other and other.id != user_id:
                    raise ConflictError("Email already in use")
            fields["email"] = email

        if fields.get("password"):
            fields["password"] = hash_password(fields["password"], self.settings.bcrypt_rounds)
        else:
            fields.pop("password", None)

        updated = await self.users.update(user_id, fields)
        if updated is None:
            raise NotFoundError("User not found")
        logger.info("user_updated", user_id=user_id, by=principal.user_id, fields=sorted(fields))
        return updated

    async def delete_user(self, user_id: str) -> None:
        user = await self.get_user(user_id)
        if user.role == UserRole.ADMIN and await self._admin_count() <= 1:
            raise ValidationError("Cannot delete the last admin")
        await self.users.delete(user_id)
        logger.info("user_deleted", user_id=user_id)
