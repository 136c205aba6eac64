"""Video record domain model."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def new_video_id() -> str:
    """Generate a fresh opaque video identifier."""
    return str(uuid4())


class VideoRecord(BaseModel):
    """Persisted metadata for one uploaded video.

    The ``id`` is generated by the service before any storage write and is the
    join key between this record and both storage objects. A record may exist
    while its ``video_url`` still points at an object that has not been
    uploaded yet (placeholder state).
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(
        default_factory=new_video_id,
        description="Opaque unique identifier, generated by the service",
    )
    title: str = Field(min_length=1, description="Video title")
    description: str | None = Field(default=None, description="Optional description")
    video_url: str = Field(description="Object storage URL of the encoded video")
    thumbnail_url: str | None = Field(
        default=None,
        description="Object storage URL of the thumbnail, absent until uploaded",
    )
    owner: str = Field(min_length=1, description="Identifier of the uploader")
    likes: int = Field(default=0, ge=0, description="Like counter")
    views: int = Field(default=0, ge=0, description="View counter")
    created_at: datetime | None = Field(
        default=None,
        description="Set by the metadata store on insert",
    )

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    @field_validator("thumbnail_url")
    @classmethod
    def _normalize_missing_thumbnail(cls, value: str | None) -> str | None:
        # Older rows carry the literal string "None" as a placeholder.
        if value in ("", "None"):
            return None
        return value

    def to_insert_row(self) -> dict[str, Any]:
        """Build the row sent to the metadata store on insert.

        ``created_at``, ``likes`` and ``views`` are left to store defaults.
        """
        return self.model_dump(
            mode="json",
            exclude={"created_at", "likes", "views"},
        )


class VideoArtifactPatch(BaseModel):
    """Fields that may be changed through a general update.

    Counters are deliberately absent: ``likes`` and ``views`` only change
    through the atomic store procedures.
    """

    model_config = ConfigDict(extra="forbid")

    video_url: str
    thumbnail_url: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Serialize the patch, omitting unset fields."""
        return self.model_dump(mode="json", exclude_none=True)
