"""Temporary artifact staging."""

from video_service.infrastructure.staging.temp_store import StagedJob, StagingArea

__all__ = [
    "StagingArea",
    "StagedJob",
]
