"""Metadata store abstractions and implementations."""

from video_service.commons.infrastructure.metadata.base import (
    MetadataStoreBase,
    RecordNotFoundError,
)
from video_service.commons.infrastructure.metadata.postgrest_provider import (
    PostgrestMetadataStore,
)

__all__ = [
    # Base classes
    "MetadataStoreBase",
    "RecordNotFoundError",
    # Implementations
    "PostgrestMetadataStore",
]
