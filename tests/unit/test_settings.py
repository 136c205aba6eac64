"""Unit tests for settings models and loader."""

import json

import pytest

from video_service.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from video_service.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    MetadataStoreSettings,
    ServerSettings,
    Settings,
    SupabaseSettings,
    TranscoderSettings,
    UploadSettings,
)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "video-service"
        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]

    def test_sections_are_immutable(self):
        settings = AppSettings()
        with pytest.raises(ValueError):
            settings.debug = True  # type: ignore[misc]


class TestServerSettings:
    """Tests for ServerSettings model."""

    def test_default_values(self):
        settings = ServerSettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 3000
        assert settings.cors_origins == ["*"]
        assert settings.api_prefix == ""

    def test_port_validation(self):
        with pytest.raises(ValueError):
            ServerSettings(port=0)

        with pytest.raises(ValueError):
            ServerSettings(port=70000)


class TestStorageSettings:
    """Tests for blob storage and metadata store sections."""

    def test_blob_defaults(self):
        settings = BlobStorageSettings()
        assert settings.provider == "supabase"
        assert settings.bucket == "videos"
        assert settings.minio.endpoint == "localhost:9000"

    def test_unknown_blob_provider_rejected(self):
        with pytest.raises(ValueError):
            BlobStorageSettings(provider="gcs")  # type: ignore[arg-type]

    def test_metadata_defaults(self):
        settings = MetadataStoreSettings()
        assert settings.table == "videos"
        assert settings.increment_views_procedure == "increment_views"
        assert settings.toggle_like_procedure == "toggle_like"

    def test_supabase_timeouts_must_be_positive(self):
        with pytest.raises(ValueError):
            SupabaseSettings(timeout_seconds=0)


class TestTranscoderAndUploadSettings:
    """Tests for transcoder and upload limit sections."""

    def test_transcoder_defaults(self):
        settings = TranscoderSettings()
        assert settings.ffmpeg_path == "ffmpeg"
        assert settings.timeout_seconds == 900
        assert settings.run_concurrently is True

    def test_upload_limits_in_bytes(self):
        settings = UploadSettings(max_video_size_mb=1, max_thumbnail_size_mb=2)
        assert settings.max_video_size_bytes == 1024 * 1024
        assert settings.max_thumbnail_size_bytes == 2 * 1024 * 1024


class TestSettingsLoader:
    """Tests for SettingsLoader."""

    def test_load_defaults_without_files(self, tmp_path):
        loader = SettingsLoader(config_dir=tmp_path, environ={})
        settings = loader.load()

        assert isinstance(settings, Settings)
        assert settings.server.port == 3000
        assert settings.blob_storage.bucket == "videos"

    def test_load_from_json(self, tmp_path):
        (tmp_path / "appsettings.json").write_text(
            json.dumps({"server": {"port": 9000}, "blob_storage": {"bucket": "clips"}})
        )

        settings = SettingsLoader(config_dir=tmp_path, environ={}).load()

        assert settings.server.port == 9000
        assert settings.blob_storage.bucket == "clips"

    def test_environment_file_overrides_base(self, tmp_path):
        (tmp_path / "appsettings.json").write_text(
            json.dumps({"server": {"port": 9000, "workers": 2}})
        )
        (tmp_path / "appsettings.prod.json").write_text(
            json.dumps({"server": {"port": 9100}})
        )

        settings = SettingsLoader(
            config_dir=tmp_path,
            environ={"VIDEO_SERVICE__APP__ENVIRONMENT": "prod"},
        ).load()

        assert settings.server.port == 9100
        assert settings.server.workers == 2
        assert settings.app.environment == "prod"

    def test_legacy_env_vars(self, tmp_path):
        settings = SettingsLoader(
            config_dir=tmp_path,
            environ={
                "SUPABASE_URL": "https://project.supabase.co",
                "SUPABASE_API_KEY": "service-key",
                "SUPABASE_BUCKET": "clips",
            },
        ).load()

        assert settings.supabase.url == "https://project.supabase.co"
        assert settings.supabase.api_key == "service-key"
        assert settings.blob_storage.bucket == "clips"

    def test_prefixed_env_vars_win_over_legacy(self, tmp_path):
        settings = SettingsLoader(
            config_dir=tmp_path,
            environ={
                "SUPABASE_URL": "https://legacy.supabase.co",
                "VIDEO_SERVICE__SUPABASE__URL": "https://nested.supabase.co",
            },
        ).load()

        assert settings.supabase.url == "https://nested.supabase.co"

    def test_env_vars_override_json(self, tmp_path):
        (tmp_path / "appsettings.json").write_text(
            json.dumps({"transcoder": {"ffmpeg_path": "/opt/ffmpeg"}})
        )

        settings = SettingsLoader(
            config_dir=tmp_path,
            environ={
                "VIDEO_SERVICE__TRANSCODER__FFMPEG_PATH": "/usr/bin/ffmpeg",
                "VIDEO_SERVICE__SERVER__PORT": "8080",
            },
        ).load()

        assert settings.transcoder.ffmpeg_path == "/usr/bin/ffmpeg"
        assert settings.server.port == 8080

    def test_json_list_env_var(self, tmp_path):
        settings = SettingsLoader(
            config_dir=tmp_path,
            environ={
                "VIDEO_SERVICE__SERVER__CORS_ORIGINS": '["https://app.example.com"]',
            },
        ).load()

        assert settings.server.cors_origins == ["https://app.example.com"]

    def test_nested_minio_section(self, tmp_path):
        settings = SettingsLoader(
            config_dir=tmp_path,
            environ={
                "VIDEO_SERVICE__BLOB_STORAGE__PROVIDER": "minio",
                "VIDEO_SERVICE__BLOB_STORAGE__MINIO__ENDPOINT": "minio:9000",
            },
        ).load()

        assert settings.blob_storage.provider == "minio"
        assert settings.blob_storage.minio.endpoint == "minio:9000"


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_returns_cached_instance(self, tmp_path):
        first = get_settings(config_dir=tmp_path)
        second = get_settings(config_dir=tmp_path)
        assert first is second

    def test_reload_builds_new_instance(self, tmp_path):
        first = get_settings(config_dir=tmp_path)
        second = get_settings(config_dir=tmp_path, reload=True)
        assert first is not second
