"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from video_service.commons.infrastructure.blob import (
    BlobStorageBase,
    MinioBlobStorage,
    SupabaseBlobStorage,
)
from video_service.commons.infrastructure.metadata import (
    MetadataStoreBase,
    PostgrestMetadataStore,
)
from video_service.commons.settings.models import Settings
from video_service.commons.telemetry import get_logger
from video_service.infrastructure.repositories import VideoRepository
from video_service.infrastructure.staging import StagingArea
from video_service.infrastructure.video import FFmpegTranscoder, TranscoderBase


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings and
    caches them, so one pooled HTTP client exists per remote service.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        """Settings this factory builds providers from."""
        return self._settings

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance.

        Returns:
            Configured blob storage provider.

        Raises:
            ValueError: If provider is not supported.
        """
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            provider = blob_settings.provider

            if provider == "supabase":
                supabase = self._settings.supabase
                self._instances["blob_storage"] = SupabaseBlobStorage(
                    url=supabase.url,
                    api_key=supabase.api_key,
                    timeout_seconds=supabase.timeout_seconds,
                    upload_timeout_seconds=supabase.upload_timeout_seconds,
                )
            elif provider == "minio":
                minio = blob_settings.minio
                self._instances["blob_storage"] = MinioBlobStorage(
                    endpoint=minio.endpoint,
                    access_key=minio.access_key,
                    secret_key=minio.secret_key,
                    secure=minio.use_ssl,
                    region=minio.region,
                    public_base_url=minio.public_base_url,
                )
            else:
                raise ValueError(f"Unsupported blob storage provider: {provider}")

        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_metadata_store(self) -> MetadataStoreBase:
        """Get metadata store instance.

        Returns:
            Configured metadata store provider.
        """
        if "metadata_store" not in self._instances:
            supabase = self._settings.supabase
            self._instances["metadata_store"] = PostgrestMetadataStore(
                url=supabase.url,
                api_key=supabase.api_key,
                schema_name=self._settings.metadata_store.schema_name,
                timeout_seconds=supabase.timeout_seconds,
            )
        return cast("MetadataStoreBase", self._instances["metadata_store"])

    def get_video_repository(self) -> VideoRepository:
        """Get the video record repository."""
        if "video_repository" not in self._instances:
            store_settings = self._settings.metadata_store
            self._instances["video_repository"] = VideoRepository(
                store=self.get_metadata_store(),
                table=store_settings.table,
                increment_views_procedure=store_settings.increment_views_procedure,
                toggle_like_procedure=store_settings.toggle_like_procedure,
            )
        return cast("VideoRepository", self._instances["video_repository"])

    def get_transcoder(self) -> TranscoderBase:
        """Get transcoder instance.

        Returns:
            Configured transcoder.
        """
        if "transcoder" not in self._instances:
            transcoder = self._settings.transcoder
            self._instances["transcoder"] = FFmpegTranscoder(
                ffmpeg_path=transcoder.ffmpeg_path,
                timeout_seconds=transcoder.timeout_seconds,
            )
        return cast("TranscoderBase", self._instances["transcoder"])

    def get_staging_area(self) -> StagingArea:
        """Get the staging area for temporary job files."""
        if "staging" not in self._instances:
            staging = self._settings.staging
            self._instances["staging"] = StagingArea(
                directory=staging.directory,
                prefix=staging.prefix,
            )
        return cast("StagingArea", self._instances["staging"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                self._logger.warning(f"Failed to close {name}: {e}")

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
