"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - TOML/JSON config file
    - Environment variables (_Z_* prefix, e.g. _Z_DATA)
    - Default values

Key components:
    - AppConfig: Main configuration model
    - load_config(): Safe config loading with fallback
    - ConfigLoadResult: Metadata about config source
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from unittest.mock import patch

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from zjump.core.result import ConfigurationError
from zjump.core.store import DEFAULT_DATA_FILE, MAX_SCORE

CONFIG_ENV_VAR = "ZJUMP_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "zjump" / "config.toml"


class AppConfig(BaseSettings):
    """zjump configuration."""

    model_config = SettingsConfigDict(
        env_prefix="_Z_",
        extra="ignore",
    )

    data: Path = Field(
        default_factory=lambda: DEFAULT_DATA_FILE,
        description="Data file holding remembered directories.",
    )
    max_score: float = Field(
        default=MAX_SCORE, gt=0, description="Total rank above which the store is aged."
    )
    exclude_dirs: list[str] = Field(
        default_factory=list,
        description="Directories (and their subdirectories) never recorded by --add.",
    )
    cmd: str = Field(default="z", description="Name of the shell function defined by --init.")
    log_level: str = Field(default="WARNING", description="Log level for zjump diagnostics.")

    @field_validator("data", mode="after")
    @classmethod
    def expand_data(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("exclude_dirs", mode="after")
    @classmethod
    def normalize_excludes(cls, v: list[str]) -> list[str]:
        return [str(Path(item).expanduser()).rstrip("/") or "/" for item in v if item]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        # Environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


def _resolve_config_path(config_path: Path | None, env_vars: Mapping[str, str]) -> Path:
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(candidate).expanduser()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    parser = json.loads if path.suffix.lower() == ".json" else tomllib.loads

    try:
        data = parser(raw)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {path} must be a mapping.")

    return data


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are overridden by environment variables (e.g. _Z_DATA)."""
    prefix = AppConfig.model_config.get("env_prefix", "")
    return {
        field for field in AppConfig.model_fields if f"{prefix}{field}".upper() in env_vars
    }


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ConfigLoadResult]:
    """
    Load configuration with Safe Mode fallback.
    If the file or environment is invalid, returns default config + error message.
    """
    env_vars: Mapping[str, str] = os.environ if env is None else {**os.environ, **env}
    resolved_path = _resolve_config_path(config_path, env_vars)
    env_overrides = _detect_env_overrides(env_vars)

    error: str | None = None
    file_loaded = False
    file_data: dict[str, Any] = {}

    try:
        file_data = _read_config_file(resolved_path)
        file_loaded = resolved_path.is_file()
    except ConfigurationError as exc:
        error = str(exc)

    context_manager = (
        patch.dict(os.environ, env_vars, clear=False) if env is not None else nullcontext()
    )

    # pydantic-settings reports undecodable env values as SettingsError (a ValueError).
    with context_manager:
        try:
            config = AppConfig(**file_data)
        except ValueError as exc:
            error = f"{error}; {exc}" if error else str(exc)
            try:
                config = AppConfig()
            except ValueError:
                config = AppConfig.model_construct()

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result


__all__ = ["AppConfig", "CONFIG_ENV_VAR", "ConfigLoadResult", "load_config"]
