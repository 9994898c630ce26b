"""
Unit Tests for Bot Lifecycle

Tests for infrastructure/discord/bot.py:
- Intents and help command configuration
- setup_hook: container initialization, cog loading, optional sync
- Global slash command error handler
- close(): shutdown broadcast with a timeout, idempotence
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from discord_music_queue.domain.shared.messages import UserMessages
from discord_music_queue.infrastructure.discord.bot import COGS, MusicBot, create_bot


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.sync_on_startup = False
    settings.discord.guild_ids = ()
    settings.restart.shutdown_timeout_seconds = 0.05
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.initialize = AsyncMock()
    container.shutdown = AsyncMock(return_value=0)
    container.set_bot = MagicMock()
    return container


# =============================================================================
# Initialization
# =============================================================================


class TestBotInitialization:
    """Tests for MusicBot initialization."""

    @pytest.mark.asyncio
    async def test_intents(self, mock_container, mock_settings):
        """Should request voice state and guild intents."""
        bot = MusicBot(container=mock_container, settings=mock_settings)

        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True
        assert bot.help_command is None

    @pytest.mark.asyncio
    async def test_registers_with_container(self, mock_container, mock_settings):
        """Should hand itself to the container."""
        bot = MusicBot(container=mock_container, settings=mock_settings)

        mock_container.set_bot.assert_called_once_with(bot)
        assert bot.container is mock_container

    @pytest.mark.asyncio
    async def test_create_bot(self, mock_container, mock_settings):
        """Should build a MusicBot from the factory."""
        bot = create_bot(mock_container, mock_settings)
        assert isinstance(bot, MusicBot)


# =============================================================================
# Setup hook
# =============================================================================


class TestSetupHook:
    """Tests for MusicBot.setup_hook."""

    @pytest.mark.asyncio
    async def test_initializes_and_loads_cogs(self, mock_container, mock_settings):
        """Should initialize the container and load every cog."""
        bot = MusicBot(container=mock_container, settings=mock_settings)

        with patch.object(bot, "load_extension", new_callable=AsyncMock) as load:
            await bot.setup_hook()

        mock_container.initialize.assert_awaited_once()
        assert [c.args[0] for c in load.await_args_list] == list(COGS)

    @pytest.mark.asyncio
    async def test_cog_failure_does_not_stop_others(self, mock_container, mock_settings):
        """Should keep loading cogs after one fails."""
        bot = MusicBot(container=mock_container, settings=mock_settings)

        with patch.object(
            bot, "load_extension", new_callable=AsyncMock, side_effect=[RuntimeError("bad"), None]
        ) as load:
            await bot.setup_hook()

        assert load.await_count == len(COGS)

    @pytest.mark.asyncio
    async def test_sync_when_enabled(self, mock_container, mock_settings):
        """Should sync commands to configured guilds and globally."""
        mock_settings.discord.sync_on_startup = True
        mock_settings.discord.guild_ids = (123456789012345678,)
        bot = MusicBot(container=mock_container, settings=mock_settings)

        with (
            patch.object(bot, "load_extension", new_callable=AsyncMock),
            patch.object(bot.tree, "sync", new_callable=AsyncMock, return_value=[]) as sync,
        ):
            await bot.setup_hook()

        assert sync.await_count == 2


class TestAppCommandErrorHandler:
    """Tests for the global slash command error handler."""

    @pytest.mark.asyncio
    async def test_replies_ephemerally(self, mock_container, mock_settings):
        """Should tell the user the command failed."""
        bot = MusicBot(container=mock_container, settings=mock_settings)
        interaction = MagicMock()
        interaction.response.is_done.return_value = False
        interaction.response.send_message = AsyncMock()

        await bot._on_app_command_error(interaction, RuntimeError("boom"))

        interaction.response.send_message.assert_awaited_once_with(
            UserMessages.ERROR_COMMAND_FAILED, ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_uses_followup_when_responded(self, mock_container, mock_settings):
        """Should use the followup once the interaction was answered."""
        bot = MusicBot(container=mock_container, settings=mock_settings)
        interaction = MagicMock()
        interaction.response.is_done.return_value = True
        interaction.followup.send = AsyncMock(
            side_effect=discord.HTTPException(MagicMock(status=404), "Unknown interaction")
        )

        await bot._on_app_command_error(interaction, RuntimeError("boom"))

        interaction.followup.send.assert_awaited_once()


# =============================================================================
# Close
# =============================================================================


class TestBotClose:
    """Tests for MusicBot.close."""

    @pytest.mark.asyncio
    async def test_close_shuts_container_down_once(self, mock_container, mock_settings):
        """Should broadcast the shutdown once even if close is called twice."""
        bot = MusicBot(container=mock_container, settings=mock_settings)

        with patch("discord.ext.commands.Bot.close", new_callable=AsyncMock) as base_close:
            await bot.close()
            await bot.close()

        mock_container.shutdown.assert_awaited_once()
        base_close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_times_out(self, mock_container, mock_settings):
        """Should give up on a hanging shutdown and still close."""

        async def hang():
            await asyncio.sleep(10)

        mock_container.shutdown = AsyncMock(side_effect=hang)
        bot = MusicBot(container=mock_container, settings=mock_settings)

        with patch("discord.ext.commands.Bot.close", new_callable=AsyncMock) as base_close:
            await bot.close()

        base_close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_survives_shutdown_error(self, mock_container, mock_settings):
        """Should still close when the shutdown raises."""
        mock_container.shutdown = AsyncMock(side_effect=RuntimeError("boom"))
        bot = MusicBot(container=mock_container, settings=mock_settings)

        with patch("discord.ext.commands.Bot.close", new_callable=AsyncMock) as base_close:
            await bot.close()

        base_close.assert_awaited_once()
