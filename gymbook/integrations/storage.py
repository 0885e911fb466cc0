"""
Gym image storage on S3.
"""
import logging
import time
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from gymbook.core.config import settings
from gymbook.core.exceptions import InternalError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = [
    "image/jpeg",
    "image/png",
    "image/svg+xml",
    "image/heic",
    "image/webp",
]
MAX_IMAGES_PER_UPLOAD = 10


def validate_image(content_type: Optional[str], size: int) -> None:
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            "Only image files are allowed (jpg, jpeg, svg, png, heic, webp)",
            field="images",
        )
    if size > settings.MAX_IMAGE_BYTES:
        raise ValidationError(
            f"Image exceeds the maximum size of {settings.MAX_IMAGE_BYTES // (1024 * 1024)}MB",
            field="images",
        )


def build_object_key(folder: str, filename: str) -> str:
    safe_filename = "".join(c for c in filename if c.isalnum() or c in "._-")[:100] or "image"
    return f"{folder}/{int(time.time() * 1000)}_{safe_filename}"


class ImageStorage:
    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                region_name=settings.AWS_REGION,
            )
        return self._client

    def upload(self, data: bytes, filename: str, content_type: str, folder: str) -> str:
        """Store one image and return its public URL."""
        key = build_object_key(folder, filename)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload failed for %s: %s", key, e)
            raise InternalError("Image upload failed")
        return self.public_url(key)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    def delete(self, url: str) -> bool:
        """Remove an object previously returned by `upload`. Failures are logged, not raised."""
        prefix = self.public_url("")
        if not url.startswith(prefix):
            logger.warning("Not an object in bucket %s: %s", self.bucket, url)
            return False
        key = url[len(prefix):]
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete failed for %s: %s", key, e)
            return False
        return True
