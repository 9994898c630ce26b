"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discord_music_queue.domain.shared.messages import ErrorMessages
from discord_music_queue.domain.shared.types import (
    DiscordSnowflake,
    PositiveFloat,
    PreviewLimit,
    RejoinAttempts,
)


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    guild_ids: tuple[DiscordSnowflake, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    sync_on_startup: bool = False

    @field_validator("guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            if not 0 < snowflake < 2**64:
                raise ValueError(f"Invalid Discord snowflake: {snowflake}")
        return v


class AudioSettings(BaseModel):
    """Stream spawning and probing configuration."""

    model_config = ConfigDict(frozen=True)

    ytdlp_format: str = "bestaudio[ext=webm][acodec=opus][asr=48000]/bestaudio"
    rate_limit: str = "100K"
    probe_bytes: int = Field(default=4096, ge=4, le=1024 * 1024)
    probe_timeout_seconds: float = Field(default=15.0, gt=0.0, le=120.0)


class QueueSettings(BaseModel):
    """Queue and notice configuration."""

    model_config = ConfigDict(frozen=True)

    max_queue_size: int = Field(default=500, ge=1, le=10_000)
    queue_preview_limit: PreviewLimit = 10
    notice_expiry_seconds: float = Field(default=10.0, ge=0.0, le=3600.0)


class VoiceSettings(BaseModel):
    """Reconnection policy for voice sessions."""

    model_config = ConfigDict(frozen=True)

    move_grace_seconds: PositiveFloat = 5.0
    max_rejoin_attempts: RejoinAttempts = 5
    rejoin_backoff_seconds: float = Field(default=5.0, ge=0.0)
    ready_timeout_seconds: PositiveFloat = 20.0
    connect_timeout_seconds: PositiveFloat = 10.0


class RestartSettings(BaseModel):
    """Shutdown broadcast configuration."""

    model_config = ConfigDict(frozen=True)

    shutdown_notice: str = Field(
        default="🔄 Restarting, playback will stop now. Queue your tracks again in a minute.",
        min_length=1,
    )
    shutdown_timeout_seconds: float = Field(default=30.0, gt=0.0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS (nested with ``__``)
    - VOICE__MAX_REJOIN_ATTEMPTS, QUEUE__NOTICE_EXPIRY_SECONDS, etc.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    restart: RestartSettings = Field(default_factory=RestartSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=sorted(valid_levels))
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
