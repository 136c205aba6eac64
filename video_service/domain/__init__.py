"""Domain layer - business models and errors."""

from video_service.domain.exceptions import (
    BlobUploadError,
    ClientError,
    DomainException,
    InvalidPayloadError,
    InvalidUploadError,
    MetadataStoreError,
    ProcessingError,
    StagingError,
    TranscodeError,
    UploadTooLargeError,
    UpstreamError,
    VideoNotFoundException,
)
from video_service.domain.models import VideoArtifactPatch, VideoRecord, new_video_id
from video_service.domain.value_objects import (
    ArtifactPaths,
    base_name,
    output_filenames,
)

__all__ = [
    # Exceptions
    "DomainException",
    "ClientError",
    "InvalidUploadError",
    "UploadTooLargeError",
    "InvalidPayloadError",
    "VideoNotFoundException",
    "UpstreamError",
    "BlobUploadError",
    "MetadataStoreError",
    "ProcessingError",
    "TranscodeError",
    "StagingError",
    # Models
    "VideoRecord",
    "VideoArtifactPatch",
    "new_video_id",
    # Value Objects
    "ArtifactPaths",
    "base_name",
    "output_filenames",
]
