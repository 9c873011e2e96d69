"""
Thumbnail object storage on S3.

Objects are addressed by `{owner}/{title}`. The boto3 client is blocking, so
calls go through FastAPI's thread pool.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, unquote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from . import settings


# Storage failures are explicit and separable from database errors.
class StorageError(RuntimeError):
    pass


def thumbnail_key(owner: str, title: str) -> str:
    return f"{owner}/{title}"


class ThumbnailStorage:
    def __init__(
        self,
        client: Any,
        *,
        bucket: str,
        region: str = "",
        endpoint_url: str | None = None,
    ) -> None:
        self._client = client
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url

    @classmethod
    def from_env(cls) -> "ThumbnailStorage":
        region = settings.aws_region()
        endpoint_url = settings.s3_endpoint_url()
        client = boto3.client(
            "s3",
            region_name=region or None,
            endpoint_url=endpoint_url,
        )
        return cls(
            client,
            bucket=settings.s3_bucket_name(),
            region=region,
            endpoint_url=endpoint_url,
        )

    def base_url(self) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/"
        return f"https://{self.bucket}.s3.amazonaws.com/"

    def url_for(self, key: str) -> str:
        return self.base_url() + quote(key)

    def key_from_url(self, url: str | None) -> str | None:
        """
        Return the object key for a URL this bucket served, else None.
        """
        base = self.base_url()
        if not url or not url.startswith(base):
            return None
        key = unquote(url[len(base):])
        return key or None

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        try:
            await run_in_threadpool(self._client.put_object, **params)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload object '{key}'.") from exc
        return self.url_for(key)

    async def delete(self, key: str) -> None:
        try:
            await run_in_threadpool(self._client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete object '{key}'.") from exc


def get_storage(request: Request) -> ThumbnailStorage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise RuntimeError("Thumbnail storage is not initialized. It is created in the app lifespan.")
    return storage
