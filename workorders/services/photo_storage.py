"""
Task photo storage on Cloudflare R2 (S3 API).

Object deletion happens after the owning task's transaction has committed and
is best-effort: a failure leaves orphaned objects in the bucket, never an
inconsistent database.
"""

import logging
import mimetypes
import uuid
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import (
    PRESIGNED_URL_EXPIRATION,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_SECRET_ACCESS_KEY,
)

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = [
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/heic",
    "image/heif",
]
MAX_PHOTO_SIZE_BYTES = 10 * 1024 * 1024  # 10MB

# S3 DeleteObjects accepts at most 1000 keys per call
DELETE_BATCH_SIZE = 1000


def get_r2_client():
    """Get configured boto3 client for Cloudflare R2"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


def build_photo_key(task_id: int, filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
    return f"tasks/{task_id}/photos/{uuid.uuid4().hex}.{ext}"


class PhotoStorage:
    """Upload, link and delete task photos"""

    def __init__(self, client=None, bucket: str = R2_BUCKET_NAME):
        self._client = client
        self.bucket = bucket

    @property
    def client(self):
        if self._client is None:
            self._client = get_r2_client()
        return self._client

    def upload(self, task_id: int, filename: str, data: bytes, content_type: Optional[str]) -> str:
        """Store a photo and return its object key"""
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        key = build_photo_key(task_id, filename)
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        logger.info(f"✅ Uploaded photo for task {task_id}: {key}")
        return key

    def presigned_url(self, key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> Optional[str]:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key, "ResponseContentDisposition": "inline"},
                ExpiresIn=expiration,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
            return None

    def delete(self, keys: list[str]) -> int:
        """Delete objects, returning how many the store accepted. Errors are logged, not raised"""
        deleted = 0
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start : start + DELETE_BATCH_SIZE]
            try:
                response = self.client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except (BotoCoreError, ClientError) as e:
                logger.error(f"❌ Failed to delete {len(batch)} photo objects: {e}")
                continue
            errors = response.get("Errors", [])
            for error in errors:
                logger.error(f"❌ Failed to delete photo {error.get('Key')}: {error.get('Message')}")
            deleted += len(batch) - len(errors)
        return deleted


def get_photo_storage() -> PhotoStorage:
    """Dependency injection for PhotoStorage"""
    return PhotoStorage()
