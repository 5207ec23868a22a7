from __future__ import annotations

import uuid
from pathlib import PurePosixPath
from typing import Any, Optional

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from newsdesk.core.config import Settings
from newsdesk.core.errors import UpstreamError, ValidationError

logger = structlog.get_logger()

CACHE_CONTROL = "max-age=31536000"


def s3_client(settings: Settings):
    return boto3.client("s3", region_name=settings.aws_region)


def file_url(settings: Settings, file_key: str) -> str:
    return f"https://{settings.s3_bucket_name}.s3.amazonaws.com/{file_key}"


def generate_upload_url(
    settings: Settings, file_name: Optional[str], content_type: Optional[str], client: Any = None
) -> dict[str, str]:
    name = PurePosixPath((file_name or "").replace("\\", "/")).name.strip()
    if not name or not content_type:
        raise ValidationError("fileName and contentType are required")

    file_key = f"{uuid.uuid4()}-{name}"
    client = client or s3_client(settings)
    try:
        upload_url = client.generate_presigned_url(
            "put_object",
            Params={
                "Bucket": settings.s3_bucket_name,
                "Key": file_key,
                "ContentType": content_type,
                "CacheControl": CACHE_CONTROL,
            },
            ExpiresIn=settings.upload_url_expires_seconds,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error("upload_url_failed", file_key=file_key, error=str(e))
        raise UpstreamError("Failed to create upload URL") from e

    logger.info("upload_url_created", file_key=file_key, content_type=content_type)
    return {"uploadUrl": upload_url, "fileKey": file_key, "fileUrl": file_url(settings, file_key)}
