"""
Settings Module for Username Watch Bot

Configuration management using Pydantic Settings.
Supports environment variables, .env files, and runtime configuration.
Includes validation, type checking, and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional
from enum import Enum

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """
    Main Settings Class

    Every value can be supplied through the environment (or a ``.env``
    file).  Only ``BOT_TOKEN`` is required.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )

    # Bot information
    BOT_NAME: str = Field(
        default="Username Watch Bot",
        min_length=1,
        max_length=64,
        description="Bot display name"
    )
    BOT_VERSION: str = Field(
        default="1.0.0",
        description="Bot version string"
    )

    # Core bot settings
    BOT_TOKEN: SecretStr = Field(
        ...,  # Required
        description="Telegram Bot API token from @BotFather"
    )
    ADMIN_ID: Optional[int] = Field(
        default=None,
        description="User ID of the admin (bypasses subscription gating)"
    )
    ADMIN_LOG_CHANNEL_ID: Optional[int] = Field(
        default=None,
        description="Chat that receives admin log events"
    )
    COMMAND_PREFIX: str = Field(
        default="!",
        min_length=1,
        max_length=3,
        description="Prefix that marks a message as a command"
    )

    # Health server
    PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Health server port"
    )
    WEB_HOST: str = Field(
        default="0.0.0.0",
        description="Health server bind address"
    )

    # Availability probe
    PROBE_URL_TEMPLATE: str = Field(
        default="https://www.instagram.com/{username}/",
        description="Profile URL template, must contain {username}"
    )
    PROBE_TIMEOUT: float = Field(
        default=15.0,
        ge=1,
        le=60,
        description="Probe request timeout in seconds"
    )
    PROBE_REFERER: str = Field(
        default="https://www.google.com/",
        description="Referer header sent with every probe"
    )

    # Poll scheduler
    POLL_INTERVAL: int = Field(
        default=60,
        ge=5,
        le=3600,
        description="Seconds between sweeps"
    )
    SWEEP_STARTUP_DELAY: float = Field(
        default=3.0,
        ge=0,
        le=60,
        description="Delay before a sweep starts iterating"
    )
    CHECK_DELAY_MIN: float = Field(
        default=10.0,
        ge=0,
        description="Minimum random delay between two checks"
    )
    CHECK_DELAY_MAX: float = Field(
        default=30.0,
        ge=0,
        description="Maximum random delay between two checks"
    )
    RATE_LIMIT_COOLDOWN: int = Field(
        default=600,
        ge=0,
        le=86400,
        description="Seconds to pause sweeping after a rate-limit response"
    )
    INITIAL_CHECK_ENABLED: bool = Field(
        default=True,
        description="Probe a username right after it is watched"
    )

    # Limits
    MAX_WATCHES_PER_USER: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Maximum concurrent watches per subscriber"
    )
    DEDUP_CACHE_SIZE: int = Field(
        default=1000,
        ge=10,
        description="Number of recent message ids remembered"
    )
    DEDUP_PRUNE_COUNT: int = Field(
        default=100,
        ge=1,
        description="How many of the oldest ids are dropped when the cache overflows"
    )

    # Logging
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level"
    )
    LOG_TO_CONSOLE: bool = Field(
        default=True,
        description="Log to stdout"
    )
    LOG_TO_FILE: bool = Field(
        default=False,
        description="Log to rotating files under LOG_DIR"
    )
    LOG_COLORIZE: bool = Field(
        default=True,
        description="Colorize console output"
    )
    LOG_DIR: Path = Field(
        default=Path("logs"),
        description="Directory for log files"
    )
    LOG_FILE_MAX_SIZE: str = Field(
        default="10 MB",
        description="Rotation size of the main log file"
    )
    LOG_FILE_BACKUP_COUNT: int = Field(
        default=5,
        ge=0,
        description="Rotated log files to keep"
    )

    @field_validator("BOT_TOKEN")
    @classmethod
    def validate_token(cls, v: SecretStr) -> SecretStr:
        """Validate Telegram bot token format."""
        token = v.get_secret_value()

        if not token:
            raise ValueError("Bot token cannot be empty")

        parts = token.split(":")
        if len(parts) != 2:
            raise ValueError("Invalid bot token format")

        try:
            int(parts[0])
        except ValueError:
            raise ValueError("Invalid bot token format: ID must be numeric")

        if len(parts[1]) < 30:
            raise ValueError("Invalid bot token format: Token too short")

        return v

    @field_validator("PROBE_URL_TEMPLATE")
    @classmethod
    def validate_url_template(cls, v: str) -> str:
        """The template must have a username placeholder."""
        if "{username}" not in v:
            raise ValueError("PROBE_URL_TEMPLATE must contain '{username}'")
        return v

    @model_validator(mode="after")
    def validate_delays(self) -> "Settings":
        """Ensure the random check delay range is ordered."""
        if self.CHECK_DELAY_MIN > self.CHECK_DELAY_MAX:
            raise ValueError(
                "CHECK_DELAY_MIN must be less than or equal to CHECK_DELAY_MAX"
            )
        return self

    @property
    def logs_dir(self) -> Path:
        """Log directory, created on first access."""
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)
        return self.LOG_DIR

    def is_admin(self, user_id: int) -> bool:
        """Check if user is the admin."""
        return self.ADMIN_ID is not None and user_id == self.ADMIN_ID


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
