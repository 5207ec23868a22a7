from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    PUBLIC = "PUBLIC"
    AUTHOR = "AUTHOR"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


class ArticleStatus(str, Enum):
    DRAFT = "Draft"
    PENDING_REVIEW = "Pending Review"
    PUBLISHED = "Published"
    REJECTED = "Rejected"


class CommentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class NotificationType(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMMENT = "COMMENT"
    GENERAL = "GENERAL"
