"""Settings and loading."""

from __future__ import annotations

import functools
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from colocated.errors import ConfigError

VisibilityPolicy = Literal["refcount", "unconditional"]


class Settings(BaseSettings):
    """Settings for document rendering and fetching."""

    model_config = SettingsConfigDict(
        env_prefix="COLOCATED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    production: bool = False
    dedupe_fragments: bool = True
    visibility_policy: VisibilityPolicy = "refcount"
    types_dir: Path | None = None
    endpoint: str | None = None
    timeout: float = 30.0
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = str(v).upper()
        if level not in valid:
            raise ValueError(f"Invalid log level: {v}. Valid: {sorted(valid)}")
        return level

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


def load_settings(config_path: str | Path | None = None, **overrides: Any) -> Settings:
    """Load settings from a YAML file, the environment and explicit overrides.

    Priority: overrides > env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            try:
                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(
                    f"Could not parse {config_path}: {e}", cause=e, path=str(config_path)
                ) from e
            if not isinstance(config_data, dict):
                raise ConfigError(
                    f"{config_path} must contain a mapping", path=str(config_path)
                )

    # pydantic-settings gives init kwargs priority over the environment, so
    # file values are only passed for keys the environment leaves unset.
    env_keys = _env_keys()
    data = {k: v for k, v in config_data.items() if k not in env_keys}
    data.update(overrides)

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}", cause=e) from e


def _env_keys() -> set[str]:
    prefix = Settings.model_config.get("env_prefix", "")
    present = {k.upper() for k in os.environ}
    return {name for name in Settings.model_fields if f"{prefix}{name}".upper() in present}


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings read from the environment, cached on first use."""
    return load_settings()
