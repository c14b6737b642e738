"""Configuration management for CCRL."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .directories.loader import DEFAULT_CONFIG_FILENAME
from .launcher.errors import ConfigurationError


class CcrlSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    slack_bot_token: str | None = Field(default=None, validation_alias="SLACK_BOT_TOKEN")
    slack_app_token: str | None = Field(default=None, validation_alias="SLACK_APP_TOKEN")
    config_path: Path = Field(
        default=Path(DEFAULT_CONFIG_FILENAME), validation_alias="CCRL_CONFIG_PATH"
    )
    dirs: str | None = Field(default=None, validation_alias="CCRL_DIRS")
    log_level: str = Field(default="INFO", validation_alias="CCRL_LOG_LEVEL")
    launch_timeout: float = Field(default=30.0, validation_alias="CCRL_LAUNCH_TIMEOUT")
    config_reload_debounce_ms: int = Field(
        default=200, validation_alias="CCRL_CONFIG_RELOAD_DEBOUNCE_MS"
    )
    claude_path: str | None = Field(default=None, validation_alias="CLAUDE_PATH")
    git_path: str | None = Field(default=None, validation_alias="GIT_PATH")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "CCRL_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("launch_timeout")
    @classmethod
    def _validate_launch_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("CCRL_LAUNCH_TIMEOUT must be > 0")
        return value

    @field_validator("config_reload_debounce_ms")
    @classmethod
    def _validate_debounce(cls, value: int) -> int:
        if value < 0:
            raise ValueError("CCRL_CONFIG_RELOAD_DEBOUNCE_MS must be >= 0")
        return value

    def require_slack_tokens(self) -> tuple[str, str]:
        """Return ``(bot_token, app_token)`` or raise when either is missing."""

        if not self.slack_bot_token:
            raise ConfigurationError("SLACK_BOT_TOKEN is required")
        if not self.slack_app_token:
            raise ConfigurationError("SLACK_APP_TOKEN is required")
        return self.slack_bot_token, self.slack_app_token


@lru_cache(maxsize=1)
def get_settings() -> CcrlSettings:
    """Return cached settings instance."""

    settings = CcrlSettings()
    settings.config_path = settings.config_path.expanduser().resolve()
    return settings


__all__ = ["CcrlSettings", "get_settings"]
