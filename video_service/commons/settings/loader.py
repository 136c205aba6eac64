"""Settings loader with hierarchical configuration support."""

import json
import os
from pathlib import Path
from typing import Any

from video_service.commons.settings.models import Settings

# Flat variable names accepted for deployments that predate the nested scheme.
LEGACY_ENV_VARS: dict[str, tuple[str, str]] = {
    "SUPABASE_URL": ("supabase", "url"),
    "SUPABASE_API_KEY": ("supabase", "api_key"),
    "SUPABASE_BUCKET": ("blob_storage", "bucket"),
}


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Environment variables (``VIDEO_SERVICE__SECTION__KEY``)
    2. Legacy flat environment variables (``SUPABASE_URL`` ...)
    3. Environment-specific config (appsettings.{env}.json)
    4. Base config (appsettings.json)
    """

    ENV_PREFIX = "VIDEO_SERVICE__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
        environ: dict[str, str] | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to 'config' in current working directory.
            environment: Environment name (dev, staging, prod).
                        Defaults to VIDEO_SERVICE__APP__ENVIRONMENT or 'dev'.
            environ: Environment mapping to read. Defaults to ``os.environ``.
        """
        self._environ = dict(os.environ if environ is None else environ)
        self.config_dir = config_dir or Path("config")
        self.environment = environment or self._environ.get(
            f"{self.ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        config = self._load_json("appsettings.json")
        config = self._deep_merge(
            config, self._load_json(f"appsettings.{self.environment}.json")
        )
        config = self._deep_merge(config, self._load_legacy_env_vars())
        config = self._deep_merge(config, self._load_env_vars())

        return Settings(**config)

    def _load_env_vars(self) -> dict[str, Any]:
        """Load prefixed environment variables into a nested dict.

        ``VIDEO_SERVICE__SUPABASE__API_KEY=abc`` becomes
        ``{"supabase": {"api_key": "abc"}}``. Values stay strings and are
        converted by the pydantic field types, except JSON lists/objects.
        """
        result: dict[str, Any] = {}

        for key, value in self._environ.items():
            if not key.upper().startswith(self.ENV_PREFIX):
                continue

            key_path = key[len(self.ENV_PREFIX) :].lower().split("__")
            current = result
            for part in key_path[:-1]:
                current = current.setdefault(part, {})
            current[key_path[-1]] = self._parse_value(value)

        return result

    def _load_legacy_env_vars(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name, (section, field) in LEGACY_ENV_VARS.items():
            if name in self._environ:
                result.setdefault(section, {})[field] = self._environ[name]
        return result

    def _parse_value(self, value: str) -> Any:
        """Decode JSON lists/objects such as CORS origins; keep scalars as text."""
        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass
        return value

    def _load_json(self, filename: str) -> dict[str, Any]:
        """Load JSON config file.

        Args:
            filename: Name of the config file.

        Returns:
            Parsed JSON as dictionary, or empty dict if file doesn't exist.
        """
        path = self.config_dir / filename
        if path.exists():
            with path.open(encoding="utf-8") as f:
                return dict(json.load(f))
        return {}

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


class _SettingsHolder:
    instance: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the process-wide settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    if _SettingsHolder.instance is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _SettingsHolder.instance = loader.load()
    return _SettingsHolder.instance


def reset_settings() -> None:
    """Reset the cached settings instance. Useful for testing."""
    _SettingsHolder.instance = None
