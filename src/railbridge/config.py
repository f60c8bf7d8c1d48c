"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from RAILBRIDGE_* environment variables (12-factor app)
  - Fall back to a .env file in the working directory
  - Validate types and constraints when the settings object is built

The one setting with security weight is `environment`: stack traces are
rendered into error envelopes only when it is not "production", and it
defaults to "production" so a missing variable never exposes them.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["production", "development", "test"]

DEFAULT_REDACT_KEYS: tuple[str, ...] = (
    "password",
    "token",
    "authorization",
    "cookie",
    "secret",
)


class BridgeSettings(BaseSettings):
    """
    Settings for the error bridge.

    Load order (highest priority first):
      1. Environment variables (RAILBRIDGE_ENVIRONMENT, RAILBRIDGE_LOG_LEVEL, ...)
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="RAILBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default="production",
        description="Deployment environment; stacks are only exposed outside production",
    )
    log_level: str = Field(default="INFO", description="Minimum log level")
    log_json: bool = Field(default=True, description="JSON log lines instead of console output")
    log_redact_keys: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REDACT_KEYS),
        description="Log event keys whose values are replaced with [REDACTED]",
    )
    internal_error_message: str = Field(
        default="Internal server error",
        min_length=1,
        description="Message rendered in place of details that must not leak",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, value: object) -> object:
        """Accept 'Production', ' DEVELOPMENT ' and friends."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Reject names the stdlib logging module doesn't know."""
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
