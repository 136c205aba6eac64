"""Domain models."""

from video_service.domain.models.video import (
    VideoArtifactPatch,
    VideoRecord,
    new_video_id,
)

__all__ = [
    "VideoArtifactPatch",
    "VideoRecord",
    "new_video_id",
]
