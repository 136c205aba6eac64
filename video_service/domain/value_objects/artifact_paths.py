"""Deterministic naming of a video's storage objects and routes."""

from __future__ import annotations

from pathlib import PurePath

from pydantic import BaseModel, ConfigDict, Field, field_validator

VIDEO_PREFIX = "videos"
THUMBNAIL_PREFIX = "thumbnails"
DEFAULT_BASE_NAME = "video"


class ArtifactPaths(BaseModel):
    """Storage paths and API routes derived from a video id.

    The path scheme is fixed: callers never choose where artifacts land.

    Examples:
        >>> paths = ArtifactPaths(video_id="abc")
        >>> paths.video_path
        'videos/abc.mp4'
        >>> paths.thumbnail_path
        'thumbnails/abc.jpg'
    """

    model_config = ConfigDict(frozen=True)

    video_id: str = Field(min_length=1)

    @field_validator("video_id")
    @classmethod
    def validate_no_separators(cls, v: str) -> str:
        """Reject ids that would escape their storage prefix."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid video id for storage path: '{v}'")
        return v

    @property
    def video_path(self) -> str:
        """Object path of the encoded video."""
        return f"{VIDEO_PREFIX}/{self.video_id}.mp4"

    @property
    def thumbnail_path(self) -> str:
        """Object path of the thumbnail image."""
        return f"{THUMBNAIL_PREFIX}/{self.video_id}.jpg"

    @property
    def upload_route(self) -> str:
        """API route accepting the binary for this record."""
        return f"/videos/{self.video_id}/upload"

    @property
    def stream_route(self) -> str:
        """API route resolving the playable URL for this record."""
        return f"/videos/{self.video_id}/stream"


def base_name(filename: str | None) -> str:
    """Return the original filename without directories or extension.

    The declared filename is only trusted for naming, never for content type.
    """
    if not filename:
        return DEFAULT_BASE_NAME
    stem = PurePath(filename.replace("\\", "/")).stem
    return stem or DEFAULT_BASE_NAME


def output_filenames(filename: str | None, job_id: str) -> tuple[str, str]:
    """Derive download filenames for the encoded video and its thumbnail.

    Args:
        filename: Declared original filename of the upload.
        job_id: Identifier of the transcode job.

    Returns:
        Tuple of ``({base}-{job_id}.mp4, {base}-{job_id}-thumbnail.jpg)``.
    """
    base = base_name(filename)
    return f"{base}-{job_id}.mp4", f"{base}-{job_id}-thumbnail.jpg"
