from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from newsdesk.models import UserRole


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LoginRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(ApiModel):
    refresh_token: Optional[str] = None


class ArticleFields(ApiModel):
    slug: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    cover_image_url: Optional[str] = None
    image_urls: Optional[list[str]] = None
    video_url: Optional[str] = None
    category_id: Optional[str] = None
    tags: Optional[list[str]] = None
    author_id: Optional[str] = None
    status: Optional[str] = None
    published_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    is_advertisement: Optional[bool] = None
    is_featured: Optional[bool] = None


class ArticleCreate(ArticleFields):
    title: str


class ArticleUpdate(ArticleFields):
    title: Optional[str] = None


class StatusUpdate(ApiModel):
    status: Optional[str] = None
    reason: Optional[str] = None
    published_at: Optional[str] = None


class FeaturedItem(ApiModel):
    article_id: str
    is_featured: bool


class FeaturedUpdate(ApiModel):
    updates: list[FeaturedItem]


class CommentCreate(ApiModel):
    text: Optional[str] = None


class CommentStatusUpdate(ApiModel):
    status: str


class CategoryFields(ApiModel):
    description: Optional[str] = None
    image_url: Optional[str] = None
    parent_category_id: Optional[str] = None
    show_in_header: Optional[bool] = None


class CategoryCreate(CategoryFields):
    name: Optional[str] = None
    slug: Optional[str] = None


class CategoryUpdate(CategoryFields):
    name: Optional[str] = None
    slug: Optional[str] = None


class UserCreate(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None


class UserUpdate(UserCreate):
    pass


class SubscribeRequest(ApiModel):
    email: Optional[str] = None
    name: Optional[str] = None
    preferences: Optional[dict[str, Any]] = None


class UnsubscribeRequest(ApiModel):
    email: Optional[str] = None


class ContactRequest(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class UploadUrlRequest(ApiModel):
    file_name: Optional[str] = None
    content_type: Optional[str] = None
