"""DTOs for video record operations."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from video_service.domain.models import VideoRecord
from video_service.domain.value_objects import ArtifactPaths


class CreateVideoRequest(BaseModel):
    """Request to create a placeholder video record."""

    title: str = Field(min_length=1, max_length=500, description="Video title")
    description: str | None = Field(
        default=None,
        max_length=5000,
        description="Optional description",
    )
    owner: str = Field(min_length=1, description="Identifier of the uploader")

    @field_validator("title", "owner")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class CreateVideoResponse(BaseModel):
    """Response after a placeholder record was created."""

    id: str = Field(description="Generated video ID")
    title: str = Field(description="Video title")
    upload_url: str = Field(description="Route accepting the video binary")


class VideoSummary(BaseModel):
    """Public view of a video record."""

    id: str = Field(description="Video ID")
    title: str = Field(description="Video title")
    description: str | None = Field(default=None, description="Description")
    video_url: str = Field(description="Playable URL of the encoded video")
    stream_url: str = Field(description="Route resolving the playable URL")
    thumbnail_url: str | None = Field(default=None, description="Thumbnail URL")
    created_at: datetime | None = Field(default=None, description="Creation time")
    likes: int = Field(ge=0, description="Like counter")
    views: int = Field(ge=0, description="View counter")
    owner: str = Field(description="Identifier of the uploader")

    @classmethod
    def from_record(
        cls,
        record: VideoRecord,
        video_url: str | None = None,
    ) -> "VideoSummary":
        """Build the public view; ``video_url`` overrides the stored value."""
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            video_url=video_url or record.video_url,
            stream_url=ArtifactPaths(video_id=record.id).stream_route,
            thumbnail_url=record.thumbnail_url,
            created_at=record.created_at,
            likes=record.likes,
            views=record.views,
            owner=record.owner,
        )


class LikeResponse(BaseModel):
    """Like counter after a toggle."""

    id: str = Field(description="Video ID")
    likes: int = Field(ge=0, description="New like count")
