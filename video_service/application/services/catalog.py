"""Video record management: listing, lookup, creation and deletion."""

import asyncio

from video_service.application.dtos.videos import (
    CreateVideoRequest,
    CreateVideoResponse,
    LikeResponse,
    VideoSummary,
)
from video_service.commons.infrastructure.blob.base import BlobStorageBase
from video_service.commons.settings.models import Settings
from video_service.commons.telemetry import LogContext, get_logger
from video_service.domain.models import VideoRecord, new_video_id
from video_service.domain.value_objects import ArtifactPaths
from video_service.infrastructure.repositories import VideoRepository


class VideoCatalogService:
    """Operations on video records that do not touch the transcoder."""

    def __init__(
        self,
        repository: VideoRepository,
        blob_storage: BlobStorageBase,
        settings: Settings,
    ) -> None:
        self._repository = repository
        self._blob = blob_storage
        self._bucket = settings.blob_storage.bucket
        self._logger = get_logger(__name__)

    async def list_videos(self) -> list[VideoSummary]:
        """List all videos, newest first."""
        records = await self._repository.list_newest_first()
        return [self._summary(record) for record in records]

    async def get_video(self, video_id: str) -> VideoSummary:
        """Fetch a video and count the view.

        Raises:
            VideoNotFoundException: If the video does not exist.
        """
        record = await self._repository.get(video_id)
        views = await self._repository.increment_views(video_id)
        return self._summary(record.model_copy(update={"views": views}))

    async def create_video(self, request: CreateVideoRequest) -> CreateVideoResponse:
        """Insert a placeholder record and return where to upload the binary.

        The record's ``video_url`` already points at the object the upload
        will produce.
        """
        paths = ArtifactPaths(video_id=new_video_id())
        record = VideoRecord(
            id=paths.video_id,
            title=request.title,
            description=request.description,
            owner=request.owner,
            video_url=self._blob.public_url(self._bucket, paths.video_path),
        )
        await self._repository.insert(record)

        self._logger.info(
            "Video record created",
            extra={"video_id": record.id, "owner": record.owner},
        )
        return CreateVideoResponse(
            id=record.id,
            title=record.title,
            upload_url=paths.upload_route,
        )

    async def stream_url(self, video_id: str) -> str:
        """Resolve the playable URL of a video.

        Records written by older clients hold a relative route instead of an
        absolute URL; those resolve to the deterministic storage path.
        """
        record = await self._repository.get(video_id)
        return self._playable_url(record)

    async def delete_video(self, video_id: str) -> None:
        """Delete the record, then its blobs on a best-effort basis."""
        with LogContext(video_id=video_id):
            await self._repository.get(video_id)
            await self._repository.delete(video_id)

            paths = ArtifactPaths(video_id=video_id)
            results = await asyncio.gather(
                self._blob.delete(self._bucket, paths.video_path),
                self._blob.delete(self._bucket, paths.thumbnail_path),
                return_exceptions=True,
            )
            for path, result in zip(
                (paths.video_path, paths.thumbnail_path), results, strict=True
            ):
                if isinstance(result, Exception):
                    self._logger.warning(
                        f"Blob deletion failed: {result}",
                        extra={"path": path},
                    )
            deleted = [result is True for result in results]
            self._logger.info(
                "Video deleted",
                extra={"video_blob_deleted": deleted[0], "thumbnail_deleted": deleted[1]},
            )

    async def like_video(self, video_id: str) -> LikeResponse:
        """Toggle a like through the store procedure."""
        await self._repository.get(video_id)
        likes = await self._repository.toggle_like(video_id)
        return LikeResponse(id=video_id, likes=likes)

    def _summary(self, record: VideoRecord) -> VideoSummary:
        return VideoSummary.from_record(record, self._playable_url(record))

    def _playable_url(self, record: VideoRecord) -> str:
        # Older records hold a relative route instead of an absolute URL.
        if record.video_url.startswith("http"):
            return record.video_url
        return self._blob.public_url(
            self._bucket, ArtifactPaths(video_id=record.id).video_path
        )
