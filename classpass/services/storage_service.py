"""
Cloudflare R2 (S3-compatible) storage for school logos and student photos.
"""
import asyncio
from io import BytesIO
from uuid import uuid4

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from classpass.config import settings
from classpass.core.exceptions import ServiceError, ValidationError
from classpass.core.logging import get_logger

logger = get_logger(__name__)

IMAGE_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


class StorageUnavailableError(ServiceError):
    code = "STORAGE_UNAVAILABLE"
    status_code = 503


def _r2_client():
    if not settings.R2_ACCOUNT_ID or not settings.R2_ACCESS_KEY_ID or not settings.R2_SECRET_ACCESS_KEY:
        raise StorageUnavailableError(
            "R2 storage not configured: set R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY"
        )
    return boto3.client(
        service_name="s3",
        endpoint_url=f"https://{settings.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.R2_ACCESS_KEY_ID,
        aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
        region_name="auto",
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
    )


def public_url(key: str) -> str:
    """Build public URL for an object key."""
    base = settings.STORAGE_PUBLIC_BASE_URL.rstrip("/")
    key = key.lstrip("/")
    return f"{base}/{key}" if key else base


def image_key(school_id, folder: str, content_type: str) -> str:
    """
    Object key for an uploaded image: {folder}/{school_id}/{uuid}.{ext}

    Raises:
        ValidationError: unsupported content type
    """
    ext = IMAGE_EXTENSIONS.get(content_type or "")
    if not ext:
        raise ValidationError("Only JPEG, PNG or WebP images are accepted", code="INVALID_FILE_TYPE")
    return f"{folder}/{school_id}/{uuid4().hex}.{ext}"


async def upload_image(school_id, folder: str, content: bytes, content_type: str) -> str:
    """Upload an image for a school and return its public URL."""
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError("File is too large", code="FILE_TOO_LARGE")
    key = image_key(school_id, folder, content_type)
    client = _r2_client()

    def _put():
        try:
            client.upload_fileobj(
                BytesIO(content),
                settings.R2_BUCKET_NAME,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except ClientError as e:
            raise StorageUnavailableError(f"Storage upload failed: {e}") from e

    await asyncio.to_thread(_put)
    logger.info("Image uploaded", extra={"school_id": str(school_id), "key": key})
    return public_url(key)
