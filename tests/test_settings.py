"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values of every settings section
- Range validation (queue limits, probe size, reconnect policy)
- Custom validators (log level, snowflake IDs)
- Aliases and loading from environment variables
- Settings caching and clearing
"""

import pytest
from pydantic import ValidationError

from discord_music_queue.config.settings import (
    AudioSettings,
    DiscordSettings,
    QueueSettings,
    RestartSettings,
    Settings,
    VoiceSettings,
    clear_settings_cache,
    get_settings,
)

# =============================================================================
# Section Tests
# =============================================================================


class TestDiscordSettings:
    """Unit tests for DiscordSettings configuration."""

    def test_create_with_defaults(self):
        """Should create DiscordSettings with default values."""
        discord = DiscordSettings()

        assert discord.token.get_secret_value() == ""
        assert discord.guild_ids == ()
        assert discord.sync_on_startup is False

    def test_guild_ids_list_becomes_tuple(self):
        """Should accept a list of guild IDs and store a tuple."""
        discord = DiscordSettings(guild_ids=[123456789012345678])
        assert discord.guild_ids == (123456789012345678,)

    @pytest.mark.parametrize("bad_id", [0, -1, 2**64])
    def test_invalid_guild_id(self, bad_id):
        """Should reject snowflakes out of range."""
        with pytest.raises(ValidationError, match="Invalid Discord snowflake"):
            DiscordSettings(guild_ids=[bad_id])

    @pytest.mark.parametrize("alias", ["token", "bot_token", "discord_token"])
    def test_token_aliases(self, alias):
        """Should accept the token under every alias."""
        discord = DiscordSettings(**{alias: "secret"})
        assert discord.token.get_secret_value() == "secret"

    def test_token_hidden_in_repr(self):
        """Should never print the token."""
        assert "secret" not in repr(DiscordSettings(token="secret"))


class TestAudioSettings:
    """Unit tests for AudioSettings configuration."""

    def test_create_with_defaults(self):
        """Should prefer 48 kHz Opus in WebM with a rate limit."""
        audio = AudioSettings()

        assert audio.ytdlp_format.startswith("bestaudio[ext=webm][acodec=opus]")
        assert audio.rate_limit == "100K"
        assert audio.probe_bytes == 4096

    @pytest.mark.parametrize("value", [0, 2 * 1024 * 1024])
    def test_probe_bytes_range(self, value):
        """Should reject probe sizes out of range."""
        with pytest.raises(ValidationError):
            AudioSettings(probe_bytes=value)

    def test_immutability(self):
        """Should be frozen."""
        audio = AudioSettings()
        with pytest.raises(ValidationError):
            audio.rate_limit = "1M"


class TestQueueSettings:
    """Unit tests for QueueSettings configuration."""

    def test_create_with_defaults(self):
        """Should create QueueSettings with default values."""
        queue = QueueSettings()

        assert queue.max_queue_size == 500
        assert queue.queue_preview_limit == 10
        assert queue.notice_expiry_seconds == 10.0

    def test_queue_size_validation_minimum(self):
        """Should raise ValidationError for a queue size below 1."""
        with pytest.raises(ValidationError, match="greater than or equal to 1"):
            QueueSettings(max_queue_size=0)

    def test_preview_limit_maximum(self):
        """Should cap the preview limit."""
        with pytest.raises(ValidationError):
            QueueSettings(queue_preview_limit=51)


class TestVoiceSettings:
    """Unit tests for the reconnect policy."""

    def test_create_with_defaults(self):
        """Should default to five linear-backoff rejoins and a 20s ready window."""
        voice = VoiceSettings()

        assert voice.move_grace_seconds == 5.0
        assert voice.max_rejoin_attempts == 5
        assert voice.rejoin_backoff_seconds == 5.0
        assert voice.ready_timeout_seconds == 20.0

    def test_zero_backoff_allowed(self):
        """Should allow rejoining without delay."""
        assert VoiceSettings(rejoin_backoff_seconds=0).rejoin_backoff_seconds == 0

    def test_ready_timeout_must_be_positive(self):
        """Should reject a zero readiness window."""
        with pytest.raises(ValidationError):
            VoiceSettings(ready_timeout_seconds=0)

    def test_rejoin_ceiling(self):
        """Should reject absurd rejoin ceilings."""
        with pytest.raises(ValidationError):
            VoiceSettings(max_rejoin_attempts=51)


class TestRestartSettings:
    def test_notice_required(self):
        """Should reject an empty shutdown notice."""
        with pytest.raises(ValidationError):
            RestartSettings(shutdown_notice="")


# =============================================================================
# Settings (Main Container) Tests
# =============================================================================


class TestSettings:
    """Unit tests for main Settings configuration container."""

    def test_create_with_all_defaults(self, monkeypatch):
        """Should create Settings with all default values."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("DEBUG", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.discord, DiscordSettings)
        assert isinstance(settings.audio, AudioSettings)
        assert isinstance(settings.queue, QueueSettings)
        assert isinstance(settings.voice, VoiceSettings)
        assert isinstance(settings.restart, RestartSettings)

    def test_load_nested_settings_from_env(self, monkeypatch):
        """Should load nested settings using the __ delimiter."""
        monkeypatch.setenv("DISCORD__TOKEN", "env-token")
        monkeypatch.setenv("QUEUE__MAX_QUEUE_SIZE", "25")
        monkeypatch.setenv("VOICE__MAX_REJOIN_ATTEMPTS", "3")
        monkeypatch.setenv("AUDIO__RATE_LIMIT", "1M")

        settings = Settings(_env_file=None)

        assert settings.discord.token.get_secret_value() == "env-token"
        assert settings.queue.max_queue_size == 25
        assert settings.voice.max_rejoin_attempts == 3
        assert settings.audio.rate_limit == "1M"

    def test_environment_validation(self, monkeypatch):
        """Should validate environment is one of the allowed values."""
        monkeypatch.setenv("ENVIRONMENT", "invalid")

        with pytest.raises(ValidationError, match="Input should be"):
            Settings(_env_file=None)

    def test_log_level_case_insensitive(self, monkeypatch):
        """Should normalize log levels to uppercase."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert Settings(_env_file=None).log_level == "DEBUG"

    def test_log_level_invalid(self, monkeypatch):
        """Should raise ValidationError for an unknown log level."""
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None)

    def test_nested_validation_propagates(self, monkeypatch):
        """Should propagate validation errors from nested sections."""
        monkeypatch.setenv("QUEUE__MAX_QUEUE_SIZE", "0")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


# =============================================================================
# Settings Caching Tests
# =============================================================================


class TestSettingsCaching:
    """Unit tests for settings caching mechanism."""

    def test_get_settings_returns_cached_instance(self, monkeypatch):
        """Should return the same instance on repeated calls."""
        clear_settings_cache()
        monkeypatch.setenv("ENVIRONMENT", "test")

        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch):
        """Should build a new instance after the cache is cleared."""
        clear_settings_cache()
        monkeypatch.setenv("ENVIRONMENT", "test")
        settings1 = get_settings()

        clear_settings_cache()
        monkeypatch.setenv("ENVIRONMENT", "production")
        settings2 = get_settings()

        assert settings1 is not settings2
        assert settings1.environment == "test"
        assert settings2.environment == "production"
        clear_settings_cache()
