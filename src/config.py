import logging
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from exceptions import ConfigError
from history import DisputeWindow, RetentionPolicy

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EngineSettings(BaseSettings):
    """Engine configuration, read from PAYMENTS_* environment variables.

    Keyword arguments take precedence over the environment. Settings are
    frozen once built.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_ignore_empty=True,
        frozen=True,
    )

    dispute_window: Optional[int] = Field(default=None, ge=1)
    eviction_interval: int = Field(default=10_000, ge=1)
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    def retention_policy(self) -> RetentionPolicy:
        if self.dispute_window is None:
            return RetentionPolicy()
        return DisputeWindow(self.dispute_window)


def build_settings(**overrides) -> EngineSettings:
    """Build settings from the environment, applying non-None overrides on top.

    Raises ConfigError when a value from either source is invalid.
    """
    try:
        return EngineSettings(**{key: value for key, value in overrides.items() if value is not None})
    except ValidationError as e:
        raise ConfigError(_describe(e)) from e


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'settings'}: {item['msg']}"
        for item in error.errors()
    )
