from newsdesk.models.article import Article, article_date
from newsdesk.models.category import Category
from newsdesk.models.comment import ANONYMOUS_AUTHOR, Comment
from newsdesk.models.enums import ArticleStatus, CommentStatus, NotificationType, UserRole
from newsdesk.models.notification import Notification
from newsdesk.models.subscriber import Subscriber
from newsdesk.models.user import User, default_avatar_url

__all__ = [
    "ANONYMOUS_AUTHOR",
    "Article",
    "ArticleStatus",
    "Category",
    "Comment",
    "CommentStatus",
    "Notification",
    "NotificationType",
    "Subscriber",
    "User",
    "UserRole",
    "article_date",
    "default_avatar_url",
]
