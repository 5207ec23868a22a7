from __future__ import annotations

from fastapi import Request

from newsdesk.core.config import Settings
from newsdesk.repositories import NotificationRepository
from newsdesk.services.articles import ArticleService
from newsdesk.services.auth import AuthService
from newsdesk.services.categories import CategoryService
from newsdesk.services.comments import CommentService
from newsdesk.services.subscribers import SubscriberService
from newsdesk.services.users import UserService
from newsdesk.store.base import DocumentStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_article_service(request: Request) -> ArticleService:
    return ArticleService(get_store(request), get_settings(request))


def get_auth_service(request: Request) -> AuthService:
    return AuthService(get_store(request), get_settings(request))


def get_user_service(request: Request) -> UserService:
    return UserService(get_store(request), get_settings(request))


def get_category_service(request: Request) -> CategoryService:
    return CategoryService(get_store(request), get_settings(request))


def get_comment_service(request: Request) -> CommentService:
    return CommentService(get_store(request), get_settings(request))


def get_subscriber_service(request: Request) -> SubscriberService:
    return SubscriberService(get_store(request), get_settings(request))


def get_notification_repository(request: Request) -> NotificationRepository:
    return NotificationRepository(get_store(request), get_settings(request))
