"""DTOs for video upload and transcoding operations."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


class PipelineStage(str, Enum):
    """Individual stages of the upload pipeline."""

    RECEIVING = "receiving"
    VALIDATING = "validating"
    TRANSCODING = "transcoding"
    UPLOADING_VIDEO = "uploading_video"
    UPLOADING_THUMBNAIL = "uploading_thumbnail"
    UPDATING_METADATA = "updating_metadata"
    DONE = "done"
    FAILED = "failed"


VIDEO_FIELD = "video"
THUMBNAIL_FIELD = "thumbnail"
LEGACY_FILE_FIELD = "file"


@dataclass(frozen=True)
class UploadedPart:
    """One file field read from a multipart request."""

    field_name: str
    filename: str | None
    content_type: str | None
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class UploadVideoResponse(BaseModel):
    """Response after a video binary was processed and stored."""

    id: str = Field(description="Video record ID")
    video_url: str = Field(description="Public URL of the encoded video")
    thumbnail_url: str = Field(description="Public URL of the thumbnail")
    video_filename: str = Field(description="Download filename of the encoded video")
    thumbnail_filename: str = Field(description="Download filename of the thumbnail")
    video_size_bytes: int = Field(ge=0, description="Size of the encoded video")
    thumbnail_width: int | None = Field(
        default=None,
        description="Thumbnail width in pixels",
    )
    thumbnail_height: int | None = Field(
        default=None,
        description="Thumbnail height in pixels",
    )
    thumbnail_source: str = Field(
        description="'extracted' from the video or 'uploaded' by the client",
    )
