"""Settings management module."""

from video_service.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from video_service.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    MetadataStoreSettings,
    MinioSettings,
    ServerSettings,
    Settings,
    StagingSettings,
    SupabaseSettings,
    TelemetrySettings,
    TranscoderSettings,
    UploadSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Remote services
    "SupabaseSettings",
    "BlobStorageSettings",
    "MinioSettings",
    "MetadataStoreSettings",
    # Processing
    "TranscoderSettings",
    "StagingSettings",
    "UploadSettings",
    # Telemetry
    "TelemetrySettings",
]
