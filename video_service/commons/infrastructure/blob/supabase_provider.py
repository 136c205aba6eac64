"""Supabase Storage implementation of blob storage."""

import io
import time
from typing import BinaryIO

import httpx

from video_service.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobStorageBase,
    HealthStatus,
)
from video_service.commons.telemetry import get_logger, timed
from video_service.domain.exceptions import BlobUploadError


def read_all(data: BinaryIO | bytes) -> bytes:
    """Return the full content of ``data`` as bytes."""
    if isinstance(data, bytes):
        return data
    data.seek(0, io.SEEK_SET)
    return data.read()


class SupabaseBlobStorage(BlobStorageBase):
    """Blob storage backed by the Supabase Storage REST API.

    Objects are written with ``POST {url}/storage/v1/object/{bucket}/{path}``
    and served from ``{url}/storage/v1/object/public/{bucket}/{path}``, so the
    bucket must be public for the returned URLs to be playable.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout_seconds: float = 60.0,
        upload_timeout_seconds: float = 600.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the storage client.

        Args:
            url: Base URL of the Supabase project.
            api_key: Service API key, sent as ``apikey`` and bearer token.
            timeout_seconds: Timeout for small requests (delete, health).
            upload_timeout_seconds: Timeout for object uploads.
            client: Optional preconfigured HTTP client (used by tests).
        """
        self._base_url = url.rstrip("/")
        self._api_key = api_key
        self._upload_timeout = upload_timeout_seconds
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._logger = get_logger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }

    def _object_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/{bucket}/{path}"

    def public_url(self, bucket: str, path: str) -> str:
        """Build the public URL of an object."""
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{path}"

    @timed
    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a blob, overwriting any object already at ``path``."""
        payload = read_all(data)

        headers = {
            **self._headers(),
            "Content-Type": content_type,
            "x-upsert": "true",
        }

        try:
            response = await self._client.post(
                self._object_url(bucket, path),
                content=payload,
                headers=headers,
                timeout=self._upload_timeout,
            )
        except httpx.HTTPError as e:
            raise BlobUploadError(bucket, path, None, str(e)) from e

        if not response.is_success:
            raise BlobUploadError(bucket, path, response.status_code, response.text)

        self._logger.debug(
            "Uploaded blob",
            extra={"bucket": bucket, "path": path, "size_bytes": len(payload)},
        )

        return BlobMetadata(
            bucket=bucket,
            path=path,
            size_bytes=len(payload),
            content_type=content_type,
            public_url=self.public_url(bucket, path),
        )

    async def delete(self, bucket: str, path: str) -> bool:
        """Delete a blob. Failures are logged, never raised."""
        try:
            response = await self._client.delete(
                self._object_url(bucket, path),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            self._logger.warning(
                f"Blob delete failed: {e}",
                extra={"bucket": bucket, "path": path},
            )
            return False

        if not response.is_success:
            self._logger.warning(
                "Blob delete rejected",
                extra={
                    "bucket": bucket,
                    "path": path,
                    "status_code": response.status_code,
                    "body": response.text,
                },
            )
            return False
        return True

    async def health_check(self) -> HealthStatus:
        """Check that the storage API answers for this project."""
        start = time.perf_counter()
        try:
            response = await self._client.get(
                f"{self._base_url}/storage/v1/bucket",
                headers=self._headers(),
            )
            latency_ms = (time.perf_counter() - start) * 1000
            if response.is_success:
                return HealthStatus(
                    healthy=True,
                    latency_ms=latency_ms,
                    message="Supabase Storage is healthy",
                    details={"url": self._base_url},
                )
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Supabase Storage returned {response.status_code}",
                details={"url": self._base_url},
            )
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Supabase Storage health check failed: {e}",
                details={"url": self._base_url, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

