from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import bcrypt
import jwt
import structlog
from fastapi import Header, Request

from newsdesk.core.config import Settings
from newsdesk.core.errors import AuthError, ForbiddenError
from newsdesk.models import User, UserRole

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("password_hash_invalid")
        return False


def create_access_token(user: User, settings: Settings, now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now(dt.timezone.utc)
    payload = {
        "userId": user.id,
        "email": user.email,
        "role": user.role.value,
        "iat": now,
        "exp": now + dt.timedelta(seconds=settings.jwt_expires_seconds),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def new_refresh_token() -> str:
    return str(uuid.uuid4())


def verify_token(token: str, settings: Settings) -> Principal:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("jwt_token_expired")
        raise AuthError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning("jwt_invalid_token", error=str(e))
        raise AuthError("Invalid token")

    try:
        return Principal(user_id=payload["userId"], email=payload["email"], role=UserRole(payload["role"]))
    except (KeyError, ValueError):
        logger.warning("jwt_invalid_payload")
        raise AuthError("Invalid token")


def get_token_from_header(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthError("Missing or malformed Authorization header")
    token = authorization[len(BEARER_PREFIX):]
    if not token or " " in token:
        raise AuthError("Missing or malformed Authorization header")
    return token


def authenticate(authorization: Optional[str], settings: Settings, roles: tuple[UserRole, ...] = ()) -> Principal:
    principal = verify_token(get_token_from_header(authorization), settings)
    if roles and principal.role not in roles:
        logger.info("access_denied", user_id=principal.user_id, role=principal.role.value)
        raise ForbiddenError()
    return principal


def require_roles(*roles: UserRole):
    def dependency(
        request: Request,
        authorization: Optional[str] = Header(default=None, alias="Authorization"),
    ) -> Principal:
        return authenticate(authorization, request.app.state.settings, roles)

    return dependency


STAFF = (UserRole.AUTHOR, UserRole.EDITOR, UserRole.ADMIN)
EDITORS = (UserRole.EDITOR, UserRole.ADMIN)
ADMINS = (UserRole.ADMIN,)
