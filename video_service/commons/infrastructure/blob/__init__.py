"""Blob storage abstractions and implementations."""

from video_service.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobStorageBase,
    HealthStatus,
)
from video_service.commons.infrastructure.blob.minio_provider import MinioBlobStorage
from video_service.commons.infrastructure.blob.supabase_provider import (
    SupabaseBlobStorage,
)

__all__ = [
    # Base classes
    "BlobMetadata",
    "BlobStorageBase",
    "HealthStatus",
    # Implementations
    "SupabaseBlobStorage",
    "MinioBlobStorage",
]
