"""
S3 object store for room images.

Stores generated images under a public URL prefix and deletes them again
during retention purges. Only URLs under the configured prefix are treated
as owned objects.

Dependencies: boto3
System role: Object store boundary (put/delete by path)
"""

import asyncio
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from virtual_staging.core.exceptions import InfrastructureError

logger = logging.getLogger(__name__)


class S3ImageStore:
    """S3 bucket wrapper exposing put/delete by object path."""

    def __init__(
        self,
        bucket: str,
        base_url: str,
        region: str = "us-east-1",
        s3_client=None,
    ) -> None:
        """
        Initialize S3 image store.

        Args:
            bucket: S3 bucket name
            base_url: Public URL prefix objects are served under
            region: AWS region for the bucket
            s3_client: Preconfigured boto3 S3 client (created when omitted)

        Raises:
            ValueError: If bucket is empty
        """
        if not bucket:
            raise ValueError("bucket is required")

        self._bucket = bucket
        self._base_url = base_url.rstrip("/")
        self._s3_client = s3_client or boto3.client("s3", region_name=region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def key_from_url(self, url: str) -> str | None:
        """
        Object key for a URL served from this bucket.

        Returns:
            Key relative to the bucket, None for foreign URLs
        """
        prefix = f"{self._base_url}/"
        if not url or not url.startswith(prefix):
            return None
        key = url[len(prefix):].split("?", 1)[0]
        return key or None

    async def put(
        self,
        data: bytes,
        path: str,
        content_type: str = "image/jpeg",
    ) -> str:
        """
        Upload bytes and return the public URL.

        Args:
            data: Object body
            path: Object key
            content_type: MIME type stored on the object

        Returns:
            Public URL of the stored object

        Raises:
            InfrastructureError: If the upload fails
        """
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                f"{__name__}:put - {type(e).__name__}: {e}",
                extra={"bucket": self._bucket, "key": path},
            )
            raise InfrastructureError("Failed to store image", operation="s3_put") from e

        logger.info(
            f"{__name__}:put - Stored object",
            extra={"bucket": self._bucket, "key": path, "size": len(data)},
        )
        return self.public_url(path)

    async def delete(self, path: str) -> None:
        """
        Delete an object by key. Missing objects are not an error.

        Raises:
            InfrastructureError: If the delete request fails
        """
        try:
            await asyncio.to_thread(
                self._s3_client.delete_object,
                Bucket=self._bucket,
                Key=path,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                f"{__name__}:delete - {type(e).__name__}: {e}",
                extra={"bucket": self._bucket, "key": path},
            )
            raise InfrastructureError("Failed to delete image", operation="s3_delete") from e

        logger.debug(f"{__name__}:delete - Deleted object", extra={"key": path})
