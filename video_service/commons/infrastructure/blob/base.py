"""Abstract base class for blob storage operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO


@dataclass
class BlobMetadata:
    """Result of a successful upload."""

    bucket: str
    path: str
    size_bytes: int
    content_type: str
    public_url: str


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class BlobStorageBase(ABC):
    """Abstract base class for blob storage operations.

    Implementations should handle:
    - Supabase Storage (``storage/v1/object``)
    - MinIO / AWS S3

    Uploads to an existing path overwrite the object. Deletion is best
    effort: implementations log failures and never raise them.
    """

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a blob to storage.

        Args:
            bucket: Target bucket name.
            path: Path within the bucket.
            data: File-like object or bytes to upload.
            content_type: MIME type of the content.

        Returns:
            Metadata of the uploaded blob, including its public URL.

        Raises:
            BlobUploadError: If the store answers with a non-success status.
        """

    @abstractmethod
    async def delete(self, bucket: str, path: str) -> bool:
        """Delete a blob from storage.

        Args:
            bucket: Bucket name.
            path: Path within the bucket.

        Returns:
            True if the store acknowledged the deletion, False otherwise.
        """

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Build the public URL of an object. Pure string construction.

        Args:
            bucket: Bucket name.
            path: Path within the bucket.

        Returns:
            Absolute URL, valid whether or not the object exists yet.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """

    async def close(self) -> None:  # noqa: B027
        """Release pooled connections. Default is a no-op."""
