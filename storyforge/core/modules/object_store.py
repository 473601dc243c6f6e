"""
Module for storing generated images in S3.

boto3 is synchronous, so every call runs in a worker thread via
asyncio.to_thread to keep the event loop free while uploads are in flight.
"""

import asyncio
import logging
import secrets
import time
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storyforge.config import STORAGE_CONSTANTS, get_storage_settings
from ..errors import StorageError

logger = logging.getLogger(__name__)

_MISSING_BUCKET_CODES = {"NoSuchBucket", "404", "NotFound"}


def extension_for(content_type: str) -> str:
    """Map a MIME type to a file extension, defaulting to jpg."""
    return STORAGE_CONSTANTS["mime_to_extension"].get(
        content_type, STORAGE_CONSTANTS["default_extension"]
    )


def generate_key(folder: str, extension: str) -> str:
    """Build a unique object key: {folder}/{epoch-ms}-{16 hex}.{ext}."""
    timestamp = int(time.time() * 1000)
    return f"{folder}/{timestamp}-{secrets.token_hex(8)}.{extension}"


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class ObjectStore:
    """
    Upload and delete objects in a single S3 bucket.

    The bucket is probed with HeadBucket once per process before the first
    write. Two concurrent first uploads may both probe; that is harmless.
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        client=None,
    ):
        settings = get_storage_settings()
        self.bucket = bucket or settings["bucket"]
        self.region = region or settings["region"]

        if not self.bucket or not self.region:
            raise StorageError("Missing required AWS configuration (AWS_S3_BUCKET, AWS_REGION)")

        if client is None:
            client = boto3.client(
                "s3",
                region_name=self.region,
                aws_access_key_id=settings["access_key_id"],
                aws_secret_access_key=settings["secret_access_key"],
            )
        self.client = client
        self.base_url = f"https://{self.bucket}.s3.{self.region}.amazonaws.com"
        self._verified = False

    async def verify_connection(self) -> None:
        """Check that the bucket exists and is reachable.

        Raises:
            StorageError: If the bucket is missing or S3 cannot be reached
        """
        try:
            await asyncio.to_thread(self.client.head_bucket, Bucket=self.bucket)
        except ClientError as e:
            if _error_code(e) in _MISSING_BUCKET_CODES:
                raise StorageError(f"S3 bucket '{self.bucket}' does not exist") from e
            raise StorageError(f"Failed to connect to S3: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to connect to S3: {e}") from e

        self._verified = True
        logger.info(f"Verified S3 bucket {self.bucket}")

    async def _ensure_verified(self) -> None:
        if not self._verified:
            await self.verify_connection()

    def url_for(self, key: str) -> str:
        """Public URL of an object key."""
        return f"{self.base_url}/{key}"

    async def upload(
        self,
        data: bytes,
        content_type: str,
        folder: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> str:
        """
        Upload bytes and return the object's public URL.

        Args:
            data: Raw object bytes
            content_type: MIME type, also used to pick the extension
            folder: Key prefix (default "uploads")
            filename: Name within the folder; generated when omitted

        Raises:
            StorageError: Missing bucket or upload failure
        """
        await self._ensure_verified()

        folder = folder or STORAGE_CONSTANTS["default_folder"]
        if filename:
            key = f"{folder}/{filename}"
        else:
            key = generate_key(folder, extension_for(content_type))

        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=STORAGE_CONSTANTS["cache_control"],
            )
        except ClientError as e:
            logger.error(f"Failed to upload {key} to S3: {e}")
            if _error_code(e) == "NoSuchBucket":
                raise StorageError(f"S3 bucket '{self.bucket}' does not exist") from e
            raise StorageError(f"S3 upload failed: {e}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to upload {key} to S3: {e}")
            raise StorageError(f"Failed to upload file: {e}") from e

        return self.url_for(key)

    async def delete(self, key: str) -> None:
        """Delete an object by key.

        Raises:
            StorageError: If the delete call fails
        """
        await self._ensure_verified()

        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete {key} from S3: {e}")
            raise StorageError(f"Failed to delete file: {e}") from e


# Process-wide instance, created on first use
_object_store: Optional[ObjectStore] = None


def get_object_store() -> ObjectStore:
    """Get the shared ObjectStore."""
    global _object_store
    if _object_store is None:
        _object_store = ObjectStore()
    return _object_store
