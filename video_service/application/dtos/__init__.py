"""Data transfer objects for API requests and responses."""

from video_service.application.dtos.ingestion import (
    LEGACY_FILE_FIELD,
    THUMBNAIL_FIELD,
    VIDEO_FIELD,
    PipelineStage,
    UploadedPart,
    UploadVideoResponse,
)
from video_service.application.dtos.videos import (
    CreateVideoRequest,
    CreateVideoResponse,
    LikeResponse,
    VideoSummary,
)

__all__ = [
    # Ingestion
    "PipelineStage",
    "UploadedPart",
    "UploadVideoResponse",
    "VIDEO_FIELD",
    "THUMBNAIL_FIELD",
    "LEGACY_FILE_FIELD",
    # Videos
    "CreateVideoRequest",
    "CreateVideoResponse",
    "VideoSummary",
    "LikeResponse",
]
