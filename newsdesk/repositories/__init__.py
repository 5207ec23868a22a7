from newsdesk.repositories.article import ArticleRepository
from newsdesk.repositories.base import BaseRepository
from newsdesk.repositories.category import CategoryRepository
from newsdesk.repositories.comment import CommentRepository
from newsdesk.repositories.notification import NotificationRepository
from newsdesk.repositories.subscriber import SubscriberRepository
from newsdesk.repositories.user import UserRepository

__all__ = [
    "ArticleRepository",
    "BaseRepository",
    "CategoryRepository",
    "CommentRepository",
    "NotificationRepository",
    "SubscriberRepository",
    "UserRepository",
]
