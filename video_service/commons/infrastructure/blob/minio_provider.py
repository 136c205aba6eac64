"""MinIO implementation of blob storage."""

import asyncio
import io
import time
from typing import BinaryIO

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from video_service.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobStorageBase,
    HealthStatus,
)
from video_service.commons.telemetry import get_logger, timed
from video_service.domain.exceptions import BlobUploadError


class MinioBlobStorage(BlobStorageBase):
    """MinIO implementation of blob storage.

    Works with both MinIO (local development) and AWS S3. Public URLs assume
    an anonymous-read bucket policy.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str | None = None,
        public_base_url: str | None = None,
        client: Minio | None = None,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: MinIO/S3 endpoint (e.g., "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            secure: Use HTTPS connection.
            region: AWS region (optional, for S3).
            public_base_url: Base URL objects are served from, when it differs
                from the API endpoint (CDN, reverse proxy).
            client: Optional preconfigured client (used by tests).
        """
        self._client = client or Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint
        scheme = "https" if secure else "http"
        self._public_base_url = (public_base_url or f"{scheme}://{endpoint}").rstrip(
            "/"
        )
        self._logger = get_logger(__name__)

    def public_url(self, bucket: str, path: str) -> str:
        """Build the path-style public URL of an object."""
        return f"{self._public_base_url}/{bucket}/{path}"

    @timed
    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a blob, overwriting any object already at ``path``."""
        loop = asyncio.get_running_loop()

        if isinstance(data, bytes):
            data_io: BinaryIO = io.BytesIO(data)
            length = len(data)
        else:
            data.seek(0, io.SEEK_END)
            length = data.tell()
            data.seek(0)
            data_io = data

        def _upload() -> None:
            self._client.put_object(
                bucket_name=bucket,
                object_name=path,
                data=data_io,
                length=length,
                content_type=content_type,
            )

        try:
            await loop.run_in_executor(None, _upload)
        except S3Error as e:
            status = e.response.status if e.response is not None else None
            raise BlobUploadError(bucket, path, status, f"{e.code}: {e.message}") from e
        except (HTTPError, OSError) as e:
            raise BlobUploadError(bucket, path, None, str(e)) from e

        return BlobMetadata(
            bucket=bucket,
            path=path,
            size_bytes=length,
            content_type=content_type,
            public_url=self.public_url(bucket, path),
        )

    async def delete(self, bucket: str, path: str) -> bool:
        """Delete a blob. Failures are logged, never raised."""
        loop = asyncio.get_running_loop()

        def _delete() -> None:
            self._client.remove_object(bucket_name=bucket, object_name=path)

        try:
            await loop.run_in_executor(None, _delete)
        except S3Error as e:
            self._logger.warning(
                f"Blob delete failed: {e.code}",
                extra={"bucket": bucket, "path": path},
            )
            return False
        except (HTTPError, OSError) as e:
            self._logger.warning(
                f"Blob delete failed: {e}",
                extra={"bucket": bucket, "path": path},
            )
            return False
        return True

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._client.list_buckets)
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MinIO is healthy",
                details={"endpoint": self._endpoint},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MinIO health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
