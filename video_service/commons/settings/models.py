"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _Section(BaseModel):
    """Immutable configuration section shared by concurrent requests."""

    model_config = ConfigDict(frozen=True)


class AppSettings(_Section):
    """Application-level settings."""

    name: str = "video-service"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(_Section):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = ""
    docs_enabled: bool = True


class SupabaseSettings(_Section):
    """Connection to the Supabase project hosting storage and the REST API."""

    url: str = "http://localhost:54321"
    api_key: str = ""
    timeout_seconds: float = Field(default=60.0, gt=0)
    upload_timeout_seconds: float = Field(default=600.0, gt=0)


class MinioSettings(_Section):
    """MinIO/S3 connection used when the blob provider is ``minio``."""

    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    public_base_url: str | None = None


class BlobStorageSettings(_Section):
    """Blob storage settings."""

    provider: Literal["supabase", "minio"] = "supabase"
    bucket: str = "videos"
    minio: MinioSettings = Field(default_factory=MinioSettings)


class MetadataStoreSettings(_Section):
    """Relational metadata store settings (PostgREST interface)."""

    provider: Literal["postgrest"] = "postgrest"
    table: str = "videos"
    schema_name: str | None = None
    increment_views_procedure: str = "increment_views"
    toggle_like_procedure: str = "toggle_like"


class TranscoderSettings(_Section):
    """External transcoder settings.

    Encoding quality is fixed by the transcoder itself and is not configurable.
    """

    ffmpeg_path: str = "ffmpeg"
    timeout_seconds: int = Field(default=900, ge=1)
    run_concurrently: bool = True


class StagingSettings(_Section):
    """Temporary staging file settings."""

    directory: str | None = None
    prefix: str = "video-service-"


class UploadSettings(_Section):
    """Inbound upload limits."""

    max_video_size_mb: int = Field(default=2048, ge=1)
    max_thumbnail_size_mb: int = Field(default=10, ge=1)

    @property
    def max_video_size_bytes(self) -> int:
        return self.max_video_size_mb * 1024 * 1024

    @property
    def max_thumbnail_size_bytes(self) -> int:
        return self.max_thumbnail_size_mb * 1024 * 1024


class TelemetrySettings(_Section):
    """Logging settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    metadata_store: MetadataStoreSettings = Field(
        default_factory=MetadataStoreSettings
    )
    transcoder: TranscoderSettings = Field(default_factory=TranscoderSettings)
    staging: StagingSettings = Field(default_factory=StagingSettings)
    uploads: UploadSettings = Field(default_factory=UploadSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEO_SERVICE__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )
