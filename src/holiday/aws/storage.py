"""
S3 operations for holiday pages.

Uploads one static page per active domain and toggles bucket website hosting.
"""

from __future__ import annotations

from typing import Any

import structlog

from holiday.aws.base import AWS_ERRORS, is_not_found
from holiday.core.errors import StorageError
from holiday.models import Outcome

logger = structlog.get_logger()

CONTENT_TYPE = "text/html"
CACHE_CONTROL = "public, max-age=3600"
INDEX_DOCUMENT = "index.html"


def key_for(domain: str) -> str:
    """S3 key of a domain's holiday page."""
    return f"holiday/{domain}/index.html"


class StorageAdapter:
    """Holiday page storage in a single S3 bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        region: str = "us-west-2",
        endpoint_url: str | None = None,
    ) -> None:
        self._client = client
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url

    def key_for(self, domain: str) -> str:
        return key_for(domain)

    @property
    def website_host(self) -> str:
        """Host name ALB redirects point at while on vacation."""
        return f"{self.bucket}.s3.{self.region}.amazonaws.com"

    def public_url(self, domain: str) -> str:
        key = self.key_for(domain)
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.website_host}/{key}"

    async def upload(self, domain: str, html: str) -> Outcome:
        """Write the holiday page for a domain, overwriting any previous copy."""
        key = self.key_for(domain)
        try:
            await self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=html.encode("utf-8"),
                ContentType=CONTENT_TYPE,
                CacheControl=CACHE_CONTROL,
            )
        except AWS_ERRORS as exc:
            raise StorageError(
                f"Failed to upload holiday page for {domain}",
                {"operation": "put_object", "bucket": self.bucket, "key": key, "domain": domain},
            ) from exc

        logger.info("storage_upload", domain=domain, bucket=self.bucket, key=key, bytes=len(html))
        return Outcome.PERFORMED

    async def object_exists(self, domain: str) -> int | None:
        """Size in bytes of a domain's holiday page, or None if it is missing."""
        key = self.key_for(domain)
        try:
            response = await self._client.head_object(Bucket=self.bucket, Key=key)
        except AWS_ERRORS as exc:
            if is_not_found(exc, "404", "NoSuchKey", "NotFound"):
                return None
            raise StorageError(
                f"Failed to check holiday page for {domain}",
                {"operation": "head_object", "bucket": self.bucket, "key": key, "domain": domain},
            ) from exc
        return int(response.get("ContentLength", 0))

    async def is_static_hosting_enabled(self) -> bool:
        try:
            await self._client.get_bucket_website(Bucket=self.bucket)
        except AWS_ERRORS as exc:
            if is_not_found(exc, "NoSuchWebsiteConfiguration"):
                return False
            raise StorageError(
                f"Failed to read website configuration of {self.bucket}",
                {"operation": "get_bucket_website", "bucket": self.bucket},
            ) from exc
        return True

    async def enable_static_hosting(self) -> Outcome:
        if await self.is_static_hosting_enabled():
            logger.info("storage_hosting_unchanged", bucket=self.bucket, enabled=True)
            return Outcome.SKIPPED

        try:
            await self._client.put_bucket_website(
                Bucket=self.bucket,
                WebsiteConfiguration={"IndexDocument": {"Suffix": INDEX_DOCUMENT}},
            )
        except AWS_ERRORS as exc:
            raise StorageError(
                f"Failed to enable static hosting on {self.bucket}",
                {"operation": "put_bucket_website", "bucket": self.bucket},
            ) from exc

        logger.info("storage_hosting_enabled", bucket=self.bucket)
        return Outcome.PERFORMED

    async def disable_static_hosting(self) -> Outcome:
        if not await self.is_static_hosting_enabled():
            logger.info("storage_hosting_unchanged", bucket=self.bucket, enabled=False)
            return Outcome.SKIPPED

        try:
            await self._client.delete_bucket_website(Bucket=self.bucket)
        except AWS_ERRORS as exc:
            raise StorageError(
                f"Failed to disable static hosting on {self.bucket}",
                {"operation": "delete_bucket_website", "bucket": self.bucket},
            ) from exc

        logger.info("storage_hosting_disabled", bucket=self.bucket)
        return Outcome.PERFORMED
