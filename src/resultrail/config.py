"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings so a host application can tune the library without
code changes:
  - Load from RESULTRAIL_* environment variables
  - Fall back to a .env file in the working directory
  - Validate types and values on first access

    RESULTRAIL_CAPTURE_STACK_TRACE=true   → ExceptionError records StackTrace tags
    RESULTRAIL_LOG_LEVEL=DEBUG            → show captured exceptions in the log

Settings are read through get_settings(), which caches the instance.
Call get_settings.cache_clear() after changing the environment.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResultRailSettings(BaseSettings):
    """
    Library settings.

    Load order (highest priority first):
      1. Environment variables (RESULTRAIL_ prefix)
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="RESULTRAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="WARNING", description="structlog filtering level")
    capture_stack_trace: bool = Field(
        default=False,
        description="Record a StackTrace tag on every ExceptionError",
    )
    log_conversion_errors: bool = Field(
        default=True,
        description="Emit a warning when a conversion produces a ConversionError",
    )
    not_null_message: str = Field(
        default="Value can not be null",
        min_length=1,
        description="Default error message of ensure_not_null()",
    )
    predicate_message: str = Field(
        default="Predicate not satisfied",
        min_length=1,
        description="Default error message of where()",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Reject names the logging module does not know."""
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> ResultRailSettings:
    """Return the process settings, loading them on first use."""
    return ResultRailSettings()
