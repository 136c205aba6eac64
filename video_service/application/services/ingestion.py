"""Video upload pipeline: validate, transcode, store and record."""

from collections.abc import Sequence

from video_service.application.dtos.ingestion import (
    LEGACY_FILE_FIELD,
    THUMBNAIL_FIELD,
    VIDEO_FIELD,
    PipelineStage,
    UploadedPart,
    UploadVideoResponse,
)
from video_service.commons.infrastructure.blob.base import BlobStorageBase
from video_service.commons.settings.models import Settings
from video_service.commons.telemetry import LogContext, get_logger
from video_service.domain.exceptions import (
    ClientError,
    DomainException,
    InvalidUploadError,
    ProcessingError,
    UploadTooLargeError,
)
from video_service.domain.models import VideoArtifactPatch, VideoRecord, new_video_id
from video_service.domain.value_objects import ArtifactPaths, base_name, output_filenames
from video_service.infrastructure.repositories import VideoRepository
from video_service.infrastructure.staging import StagingArea
from video_service.infrastructure.video import TranscoderBase, inspect_image

ENCODED_CONTENT_TYPE = "video/mp4"
EXTRACTED_THUMBNAIL_CONTENT_TYPE = "image/jpeg"


class IngestionError(Exception):
    """Pipeline failure, tagged with the stage it happened in.

    ``cause`` is the domain exception that ended the run; its class decides
    the HTTP status.
    """

    def __init__(
        self,
        message: str,
        stage: PipelineStage,
        cause: DomainException | None = None,
    ) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(message)


class _StageTracker:
    """Current stage of one pipeline run, mirrored into the log context."""

    def __init__(self, context: LogContext) -> None:
        self._context = context
        self._logger = get_logger(__name__)
        self.current = PipelineStage.RECEIVING
        self._context.update(stage=self.current.value)

    def advance(self, stage: PipelineStage) -> None:
        self._logger.info(
            f"Pipeline stage {self.current.value} -> {stage.value}",
            extra={"from_stage": self.current.value, "to_stage": stage.value},
        )
        self.current = stage
        self._context.update(stage=stage.value)


class VideoIngestionService:
    """Orchestrates the upload pipeline for one video binary.

    Pipeline stages:
    1. Receive the multipart fields (``video``/``thumbnail`` or ``file``)
    2. Validate content types, sizes and the target record
    3. Transcode through scoped staging files
    4. Upload the encoded video, then the thumbnail
    5. Write the public URLs onto the metadata record

    A failure ends the run in that stage; later stages never run and nothing
    is compensated. Staging files are removed on every exit path.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        repository: VideoRepository,
        transcoder: TranscoderBase,
        staging: StagingArea,
        settings: Settings,
    ) -> None:
        """Initialize ingestion service with dependencies.

        Args:
            blob_storage: Object storage for the artifacts.
            repository: Video record repository.
            transcoder: Video transcoder.
            staging: Temporary file area for transcode jobs.
            settings: Application settings.
        """
        self._blob = blob_storage
        self._repository = repository
        self._transcoder = transcoder
        self._staging = staging
        self._settings = settings
        self._bucket = settings.blob_storage.bucket
        self._logger = get_logger(__name__)

    async def upload_to_record(
        self,
        video_id: str,
        parts: Sequence[UploadedPart],
    ) -> UploadVideoResponse:
        """Process the binary for a record created beforehand.

        Args:
            video_id: ID returned when the record was created.
            parts: File fields read from the multipart request.

        Returns:
            Public URLs and download names of both artifacts.

        Raises:
            IngestionError: If any stage fails.
        """
        with LogContext(video_id=video_id, flow="create_then_upload") as ctx:
            tracker = _StageTracker(ctx)
            try:
                video_part = self._select(parts, VIDEO_FIELD)
                thumbnail_part = _first(parts, THUMBNAIL_FIELD)

                tracker.advance(PipelineStage.VALIDATING)
                self._validate_video(video_part)
                thumbnail_size = (
                    self._validate_thumbnail(thumbnail_part)
                    if thumbnail_part is not None
                    else None
                )
                await self._repository.get(video_id)

                response = await self._process(
                    tracker, video_id, video_part, thumbnail_part, thumbnail_size
                )

                tracker.advance(PipelineStage.UPDATING_METADATA)
                await self._repository.set_artifact_urls(
                    video_id,
                    VideoArtifactPatch(
                        video_url=response.video_url,
                        thumbnail_url=response.thumbnail_url,
                    ),
                )
            except DomainException as e:
                raise self._failed(tracker, video_id, e) from e

            tracker.advance(PipelineStage.DONE)
            return response

    async def upload_only(
        self,
        parts: Sequence[UploadedPart],
        owner: str,
    ) -> UploadVideoResponse:
        """Process an upload that has no record yet.

        Deprecated flow: the id is generated here and the record is inserted
        only after both artifacts are stored. The title is the base name of
        the uploaded file.

        Raises:
            IngestionError: If any stage fails.
        """
        video_id = new_video_id()
        with LogContext(video_id=video_id, flow="upload_only") as ctx:
            tracker = _StageTracker(ctx)
            try:
                video_part = self._select(parts, LEGACY_FILE_FIELD)

                tracker.advance(PipelineStage.VALIDATING)
                self._validate_video(video_part)

                response = await self._process(
                    tracker, video_id, video_part, None, None
                )

                tracker.advance(PipelineStage.UPDATING_METADATA)
                await self._repository.insert(
                    VideoRecord(
                        id=video_id,
                        title=base_name(video_part.filename),
                        video_url=response.video_url,
                        thumbnail_url=response.thumbnail_url,
                        owner=owner,
                    )
                )
            except DomainException as e:
                raise self._failed(tracker, video_id, e) from e

            tracker.advance(PipelineStage.DONE)
            return response

    async def _process(
        self,
        tracker: _StageTracker,
        video_id: str,
        video_part: UploadedPart,
        thumbnail_part: UploadedPart | None,
        thumbnail_size: tuple[int, int] | None,
    ) -> UploadVideoResponse:
        """Transcode through staging files and upload both artifacts."""
        paths = ArtifactPaths(video_id=video_id)
        video_filename, thumbnail_filename = output_filenames(
            video_part.filename, video_id
        )

        tracker.advance(PipelineStage.TRANSCODING)
        async with self._staging.stage_job() as job:
            await self._staging.write(job.input_path, video_part.data)

            if thumbnail_part is None:
                output = await self._transcoder.transcode(
                    job.input_path,
                    job.video_path,
                    job.thumbnail_path,
                    concurrent=self._settings.transcoder.run_concurrently,
                )
                thumbnail_size = (output.thumbnail.width, output.thumbnail.height)
                thumbnail_bytes = await self._staging.read(job.thumbnail_path)
                thumbnail_type = EXTRACTED_THUMBNAIL_CONTENT_TYPE
            else:
                # A client thumbnail replaces frame extraction.
                await self._transcoder.encode(job.input_path, job.video_path)
                thumbnail_bytes = thumbnail_part.data
                thumbnail_type = (
                    thumbnail_part.content_type or EXTRACTED_THUMBNAIL_CONTENT_TYPE
                )

            video_bytes = await self._staging.read(job.video_path)

            tracker.advance(PipelineStage.UPLOADING_VIDEO)
            video_blob = await self._blob.upload(
                self._bucket, paths.video_path, video_bytes, ENCODED_CONTENT_TYPE
            )

            tracker.advance(PipelineStage.UPLOADING_THUMBNAIL)
            thumbnail_blob = await self._blob.upload(
                self._bucket, paths.thumbnail_path, thumbnail_bytes, thumbnail_type
            )

        width, height = thumbnail_size if thumbnail_size else (None, None)
        return UploadVideoResponse(
            id=video_id,
            video_url=video_blob.public_url,
            thumbnail_url=thumbnail_blob.public_url,
            video_filename=video_filename,
            thumbnail_filename=thumbnail_filename,
            video_size_bytes=video_blob.size_bytes,
            thumbnail_width=width,
            thumbnail_height=height,
            thumbnail_source="extracted" if thumbnail_part is None else "uploaded",
        )

    def _select(self, parts: Sequence[UploadedPart], field: str) -> UploadedPart:
        part = _first(parts, field)
        if part is None:
            raise InvalidUploadError(f"Missing required file field '{field}'", field)
        return part

    def _validate_video(self, part: UploadedPart) -> None:
        content_type = part.content_type or ""
        if not content_type.startswith("video/"):
            raise InvalidUploadError(
                f"Field '{part.field_name}' must be a video, got "
                f"'{content_type or 'unknown'}'",
                part.field_name,
            )
        if not part.data:
            raise InvalidUploadError(
                f"Field '{part.field_name}' is empty", part.field_name
            )
        limit = self._settings.uploads.max_video_size_bytes
        if part.size_bytes > limit:
            raise UploadTooLargeError(part.field_name, part.size_bytes, limit)

    def _validate_thumbnail(self, part: UploadedPart) -> tuple[int, int]:
        content_type = part.content_type or ""
        if not content_type.startswith("image/"):
            raise InvalidUploadError(
                f"Field '{part.field_name}' must be an image, got "
                f"'{content_type or 'unknown'}'",
                part.field_name,
            )
        if not part.data:
            raise InvalidUploadError(
                f"Field '{part.field_name}' is empty", part.field_name
            )
        limit = self._settings.uploads.max_thumbnail_size_bytes
        if part.size_bytes > limit:
            raise UploadTooLargeError(part.field_name, part.size_bytes, limit)
        try:
            return inspect_image(part.data)
        except ProcessingError as e:
            raise InvalidUploadError(
                f"Field '{part.field_name}' is not a readable image",
                part.field_name,
            ) from e

    def _failed(
        self,
        tracker: _StageTracker,
        video_id: str,
        error: DomainException,
    ) -> IngestionError:
        stage = tracker.current
        tracker.advance(PipelineStage.FAILED)
        extra = {"failed_stage": stage.value, "error_type": type(error).__name__}

        if isinstance(error, ClientError):
            self._logger.warning(f"Upload rejected: {error}", extra=extra)
        else:
            self._logger.error(f"Upload failed: {error}", extra=extra)

        if stage == PipelineStage.UPLOADING_THUMBNAIL:
            paths = ArtifactPaths(video_id=video_id)
            self._logger.warning(
                "Video blob stored without thumbnail, record not updated",
                extra={"orphaned": [paths.video_path]},
            )
        elif stage == PipelineStage.UPDATING_METADATA:
            paths = ArtifactPaths(video_id=video_id)
            self._logger.warning(
                "Blobs stored but metadata update failed",
                extra={"orphaned": [paths.video_path, paths.thumbnail_path]},
            )

        return IngestionError(str(error), stage, error)


def _first(parts: Sequence[UploadedPart], field: str) -> UploadedPart | None:
    return next((part for part in parts if part.field_name == field), None)
