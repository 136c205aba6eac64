"""Repositories over the metadata store."""

from video_service.infrastructure.repositories.video_repository import VideoRepository

__all__ = [
    "VideoRepository",
]
