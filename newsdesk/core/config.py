from __future__ import annotations

from functools import lru_cache
from typing import Optional

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expires_seconds: int = Field(default=3600, alias="JWT_EXPIRES_SECONDS")
    bcrypt_rounds: int = Field(default=10, alias="BCRYPT_ROUNDS")

    store_backend: str = Field(default="sqlite", alias="STORE_BACKEND")
    db_path: str = Field(default="/data/app.db", alias="DB_PATH")
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    dynamodb_endpoint_url: Optional[str] = Field(default=None, alias="DYNAMODB_ENDPOINT_URL")

    users_table: str = Field(default="Users", alias="USERS_TABLE")
    articles_table: str = Field(default="Articles", alias="ARTICLES_TABLE")
    categories_table: str = Field(default="Categories", alias="CATEGORIES_TABLE")
    comments_table: str = Field(default="Comments", alias="COMMENTS_TABLE")
    notifications_table: str = Field(default="Notifications", alias="NOTIFICATIONS_TABLE")
    subscribers_table: str = Field(default="Subscribers", alias="SUBSCRIBERS_TABLE")

    articles_slug_index: str = Field(default="slug-index", alias="ARTICLES_SLUG_INDEX")
    users_email_index: str = Field(default="email-index", alias="USERS_EMAIL_INDEX")
    categories_slug_index: str = Field(default="SlugIndex", alias="CATEGORIES_SLUG_INDEX")
    categories_name_index: str = Field(default="NameIndex", alias="CATEGORIES_NAME_INDEX")
    comments_article_index: str = Field(default="ArticleIndex", alias="COMMENTS_ARTICLE_INDEX")
    comments_status_index: str = Field(default="StatusIndex", alias="COMMENTS_STATUS_INDEX")
    notifications_user_index: str = Field(default="UserIndex", alias="NOTIFICATIONS_USER_INDEX")
    subscribers_email_index: str = Field(default="EmailIndex", alias="SUBSCRIBERS_EMAIL_INDEX")

    s3_bucket_name: str = Field(default="newsdesk-media", alias="S3_BUCKET_NAME")
    upload_url_expires_seconds: int = Field(default=300, alias="UPLOAD_URL_EXPIRES_SECONDS")
    cdn_domain: str = Field(default="https://cdn.example.com", alias="CDN_DOMAIN")
    legacy_s3_host_marker: str = Field(default="newsdesk-media.s3", alias="LEGACY_S3_HOST_MARKER")

    default_page_size: int = Field(default=20, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    fallback_users_file: Optional[str] = Field(default=None, alias="FALLBACK_USERS_FILE")

    site_name: str = Field(default="Newsdesk", alias="SITE_NAME")
    site_url: str = Field(default="https://example.com", alias="SITE_URL")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        weak_secret = self.jwt_secret == DEFAULT_JWT_SECRET or len(self.jwt_secret) < 32
        if self.app_env == "production":
            if weak_secret:
                raise ValueError(
                    "JWT_SECRET must be set to a secure value (minimum 32 characters) in production"
                )
        elif weak_secret:
            logger.warning("weak_jwt_secret", message="JWT_SECRET is weak. OK for dev, change for production!")

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
