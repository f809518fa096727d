"""Settings management for meilisearch-tasks.

This module provides the Settings class and functions for loading
configuration from YAML files and environment variables. Loading always
returns a new value: there is no process-wide settings instance, callers
pass ``settings.meilisearch`` to the client they construct.

Example:
    >>> from meilisearch_tasks.config import load_settings
    >>> settings = load_settings()
    >>> print(settings.meilisearch.url)
    http://localhost:7700
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, ClassVar

from pydantic import Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from meilisearch_tasks.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from meilisearch_tasks.config.schema import MeilisearchConfig, ObservabilityConfig


__all__ = [
    "Settings",
    "find_config_file",
    "load_settings",
]


# ---------------------------------------------------------------------------
# Environment Variable Interpolation
# ---------------------------------------------------------------------------

# Pattern for ${VAR} and ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _interpolate_env_vars(value: object) -> object:
    """Recursively interpolate ${VAR} and ${VAR:-default} in strings.

    Unknown variables without a default expand to an empty string.

    Example:
        >>> os.environ["MEILI_KEY"] = "secret123"
        >>> _interpolate_env_vars("${MEILI_KEY}")
        'secret123'
        >>> _interpolate_env_vars("${MISSING:-http://localhost:7700}")
        'http://localhost:7700'
    """
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            return match.group(2) or ""

        return _ENV_VAR_PATTERN.sub(replace, value)

    if isinstance(value, dict):
        return {k: _interpolate_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [_interpolate_env_vars(item) for item in value]

    return value


class _InterpolatingYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML settings source that expands environment variables.

    The file comes from the ``yaml_file`` entry of the settings class's
    ``model_config``; see :func:`load_settings`.
    """

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        interpolated = _interpolate_env_vars(super()._read_file(file_path))
        if not isinstance(interpolated, dict):  # pragma: no cover
            return {}
        return interpolated


# ---------------------------------------------------------------------------
# Settings Class
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Application settings loaded from YAML file and environment variables.

    Settings are loaded in priority order (highest to lowest):
    1. Constructor arguments
    2. Environment variables (``MEILI_*``, nested with ``__``)
    3. YAML configuration file
    4. Default values

    Attributes:
        meilisearch: Connection and task-polling settings.
        observability: Logging settings.

    Example:
        >>> # MEILI_MEILISEARCH__URL=http://search:7700
        >>> settings = load_settings()
        >>> client = Client.from_config(settings.meilisearch)
    """

    model_config = SettingsConfigDict(
        yaml_file=None,
        yaml_file_encoding="utf-8",
        env_prefix="MEILI_",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    CONFIG_SEARCH_PATHS: ClassVar[list[Path]] = [
        Path("meilisearch.yaml"),
        Path("meilisearch.yml"),
        Path.home() / ".config" / "meilisearch-tasks" / "config.yaml",
    ]

    meilisearch: MeilisearchConfig = Field(default_factory=MeilisearchConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @model_validator(mode="after")
    def resolve_api_key(self) -> Settings:
        """Resolve the API key from its alternative sources.

        Resolution order:
        1. Direct ``api_key`` value
        2. ``api_key_file`` contents
        3. ``MEILI_MASTER_KEY`` environment variable

        Returns:
            Self with resolved API key.

        Raises:
            ValueError: If api_key_file is set but does not exist.
        """
        if self.meilisearch.api_key:
            return self

        if self.meilisearch.api_key_file:
            key_path = self.meilisearch.api_key_file
            if not key_path.is_file():
                msg = f"API key file not found: {key_path}"
                raise ValueError(msg)
            self.meilisearch.api_key = key_path.read_text().strip()
            return self

        env_key = os.environ.get("MEILI_MASTER_KEY")
        if env_key:
            self.meilisearch.api_key = env_key
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order sources as init > env > YAML > file secrets (no dotenv)."""
        return (
            init_settings,
            env_settings,
            _InterpolatingYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


# ---------------------------------------------------------------------------
# Settings Loading Functions
# ---------------------------------------------------------------------------


def find_config_file(config_path: Path | str | None = None) -> Path | None:
    """Find the configuration file.

    Args:
        config_path: Explicit path to config file, or None to search
            default locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    if config_path is not None:
        path = Path(config_path)
        return path if path.is_file() else None

    for search_path in Settings.CONFIG_SEARCH_PATHS:
        if search_path.is_file():
            return search_path

    return None


def _settings_for_file(config_file: Path | None) -> type[Settings]:
    """Return a Settings class whose YAML source is ``config_file``.

    Each file gets its own subclass, so loading never mutates shared state.
    """
    if config_file is None:
        return Settings

    class FileSettings(Settings):
        model_config = SettingsConfigDict(yaml_file=config_file)

    return FileSettings


def load_settings(
    config_path: Path | str | None = None,
    *,
    require_config_file: bool = False,
) -> Settings:
    """Load and validate settings.

    Args:
        config_path: Path to YAML config file. If None, searches
            ./meilisearch.yaml, ./meilisearch.yml and
            ~/.config/meilisearch-tasks/config.yaml.
        require_config_file: If True, raise when no config file is found.

    Returns:
        A new, validated Settings instance.

    Raises:
        ConfigurationFileNotFoundError: When require_config_file=True and
            no config file is found, or an explicit path does not exist.
        ConfigurationValidationError: When configuration validation fails.
    """
    config_file = find_config_file(config_path)

    if config_file is None and (require_config_file or config_path is not None):
        raise ConfigurationFileNotFoundError(
            path=str(config_path) if config_path else None,
            searched_paths=[str(p) for p in Settings.CONFIG_SEARCH_PATHS],
        )

    try:
        return _settings_for_file(config_file)()
    except ConfigurationError:
        raise
    except Exception as exc:
        msg = f"Failed to load configuration: {exc}"
        errors = exc.errors() if hasattr(exc, "errors") else None
        raise ConfigurationValidationError(msg, errors=errors) from exc
