"""Application services."""

from video_service.application.services.catalog import VideoCatalogService
from video_service.application.services.ingestion import (
    IngestionError,
    VideoIngestionService,
)

__all__ = [
    "VideoCatalogService",
    "VideoIngestionService",
    "IngestionError",
]
