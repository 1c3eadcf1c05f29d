"""Application settings backed by ``RESAY_*`` environment variables and ``.env``."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_CHOICES = ("gemini", "openai", "dummy")


class Settings(BaseSettings):
    """Backend credentials, model names, storage paths and microphone defaults."""

    backend: str = "gemini"
    gemini_api_key: Optional[str] = None
    gemini_transcription_model: str = "gemini-2.5-flash"
    gemini_rewrite_model: str = "gemini-2.5-pro"
    openai_api_key: Optional[str] = None
    openai_transcription_model: str = "gpt-4o-audio-preview"
    openai_rewrite_model: str = "gpt-4o-audio-preview"
    database_path: Path = Field(default_factory=lambda: Path("resay.db"))
    export_dir: Path = Field(default_factory=lambda: Path("exports"))
    export_name_max_length: int = Field(default=30, gt=0)
    sample_rate: int = Field(default=16_000, gt=0)
    channels: int = Field(default=1, ge=1, le=2)
    default_mic_device: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="RESAY_",
        env_file=".env",
        case_sensitive=False,
    )

    @field_validator("backend")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in BACKEND_CHOICES:
            raise ValueError(f"backend must be one of {', '.join(BACKEND_CHOICES)}")
        return value


_settings: Optional[Settings] = None

_ENV_PREFIX = str(Settings.model_config.get("env_prefix") or "").upper()
_ENV_PATH = Path(str(Settings.model_config.get("env_file") or ".env"))


@dataclass
class EnvironmentSetting:
    """One configurable field as shown in the environment menu."""

    field: str
    env_name: str
    value: Any
    default: Any
    secret: bool = False


class EnvironmentSettingError(RuntimeError):
    """Raised when an environment override is rejected."""


def env_name_for(field: str) -> str:
    return f"{_ENV_PREFIX}{field}".upper()


def _default_for(field: str) -> Any:
    info = Settings.model_fields[field]
    if info.default_factory is not None:
        return info.default_factory()
    return info.default


def _rewrite_env_file(env_name: str, value: Optional[str]) -> None:
    """Set or drop ``env_name`` in the dotenv file, keeping every other line."""

    lines: List[str] = _ENV_PATH.read_text().splitlines() if _ENV_PATH.exists() else []
    kept: List[str] = []
    for line in lines:
        key, sep, _ = line.partition("=")
        if sep and not line.lstrip().startswith("#") and key.strip() == env_name:
            continue
        kept.append(line)
    if value is not None:
        kept.append(f"{env_name}={value}")

    if any(line.strip() for line in kept):
        _ENV_PATH.write_text("\n".join(kept) + "\n")
    elif _ENV_PATH.exists():
        _ENV_PATH.unlink()


def list_environment_settings(settings: Optional[Settings] = None) -> Iterator[EnvironmentSetting]:
    settings = settings or get_settings()
    for field in Settings.model_fields:
        yield EnvironmentSetting(
            field=field,
            env_name=env_name_for(field),
            value=getattr(settings, field),
            default=_default_for(field),
            secret=field.endswith("_api_key"),
        )


def _override(field: str, raw_value: Optional[str]) -> Settings:
    if field not in Settings.model_fields:
        raise EnvironmentSettingError(f"Unknown setting: {field}")

    env_name = env_name_for(field)
    snapshot: Dict[str, Optional[str]] = {env_name: os.environ.get(env_name)}
    if raw_value is None:
        os.environ.pop(env_name, None)
    else:
        os.environ[env_name] = raw_value

    try:
        reloaded = Settings()
    except ValidationError as exc:
        previous = snapshot[env_name]
        if previous is None:
            os.environ.pop(env_name, None)
        else:
            os.environ[env_name] = previous
        raise EnvironmentSettingError(str(exc)) from exc

    global _settings
    _settings = reloaded
    _rewrite_env_file(env_name, raw_value)
    return reloaded


def update_environment_setting(field: str, raw_value: str) -> Settings:
    """Override ``field``, persist it to ``.env`` and return the reloaded settings."""

    return _override(field, raw_value)


def clear_environment_setting(field: str) -> Settings:
    """Drop the override for ``field`` so its default applies again."""

    return _override(field, None)


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


__all__ = [
    "BACKEND_CHOICES",
    "EnvironmentSetting",
    "EnvironmentSettingError",
    "Settings",
    "clear_environment_setting",
    "env_name_for",
    "get_settings",
    "list_environment_settings",
    "update_environment_setting",
]
