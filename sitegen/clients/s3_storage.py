# sitegen/clients/s3_storage.py
# S3-backed hosting target (one published page per user) and asset store

from __future__ import annotations

import asyncio
import re
import time
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from sitegen.config import Settings
from sitegen.middleware.error_handler import HostingError, ValidationError
from sitegen.utils.logger import log_exception, log_info
from sitegen.utils.resilience import retry_with_backoff

HTML_CONTENT_TYPE = "text/html"
_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


def build_s3_client(settings: Settings) -> Any:
    return boto3.client("s3", region_name=settings.AWS_REGION)


class S3Bucket:
    """Async facade over one bucket. Failures surface as HostingError after retries."""

    def __init__(self, client: Any, bucket: str, max_retries: int = 2, base_delay: float = 0.5):
        self._client = client
        self.bucket = bucket
        self.max_retries = max_retries
        self.base_delay = base_delay

    def _retrying(self, func):
        return retry_with_backoff(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            exceptions=(HostingError,),
        )(func)

    async def _put_once(self, key: str, body: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            log_exception(e, context=f"s3.put_object {self.bucket}/{key}")
            raise HostingError() from e

    async def _delete_once(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_OBJECT_CODES:
                return
            log_exception(e, context=f"s3.delete_object {self.bucket}/{key}")
            raise HostingError() from e
        except BotoCoreError as e:
            log_exception(e, context=f"s3.delete_object {self.bucket}/{key}")
            raise HostingError() from e

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        await self._retrying(self._put_once)(key, body, content_type)

    async def delete(self, key: str) -> None:
        """Delete an object; a missing object counts as deleted."""
        await self._retrying(self._delete_once)(key)


class HostingTarget:
    """Static-website bucket serving one index.html per user."""

    def __init__(self, bucket: S3Bucket, base_url: str):
        self._bucket = bucket
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, client: Any, settings: Settings) -> "HostingTarget":
        base_url = settings.HOSTING_BASE_URL or (
            f"http://{settings.HOSTING_BUCKET}.s3-website.{settings.AWS_REGION}.amazonaws.com"
        )
        bucket = S3Bucket(client, settings.HOSTING_BUCKET, max_retries=settings.HOSTING_MAX_RETRIES)
        return cls(bucket, base_url)

    @staticmethod
    def key_for(user_id: int) -> str:
        return f"{user_id}/index.html"

    def url_for(self, user_id: int) -> str:
        return f"{self.base_url}/{user_id}/"

    async def write_site(self, user_id: int, html: str) -> str:
        await self._bucket.put(self.key_for(user_id), html.encode("utf-8"), HTML_CONTENT_TYPE)
        return self.url_for(user_id)

    async def remove_site(self, user_id: int) -> None:
        await self._bucket.delete(self.key_for(user_id))


class AssetStore:
    """Public bucket for images users attach to their prompts."""

    def __init__(self, bucket: S3Bucket, public_base_url: str, max_bytes: int):
        self._bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    @classmethod
    def from_settings(cls, client: Any, settings: Settings) -> "AssetStore":
        base_url = f"https://{settings.ASSET_BUCKET}.s3.{settings.AWS_REGION}.amazonaws.com"
        bucket = S3Bucket(client, settings.ASSET_BUCKET, max_retries=settings.HOSTING_MAX_RETRIES)
        return cls(bucket, base_url, settings.MAX_UPLOAD_BYTES)

    @staticmethod
    def object_key(filename: Optional[str], now_ms: Optional[int] = None) -> str:
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        safe_name = re.sub(r"\s", "_", filename or "upload")
        return f"{stamp}-{safe_name}"

    async def store(self, data: bytes, content_type: Optional[str], filename: Optional[str]) -> str:
        if not data:
            raise ValidationError("No file was uploaded")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"File is larger than {self.max_bytes // (1024 * 1024)} MB",
                details={"max_bytes": self.max_bytes},
            )

        key = self.object_key(filename)
        await self._bucket.put(key, data, content_type or "application/octet-stream")
        url = f"{self.public_base_url}/{key}"
        log_info(f"Upload succeeded. URL: {url}")
        return url
