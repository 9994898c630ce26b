"""Main Discord bot class integrating the DI container and cog lifecycle."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_music_queue.domain.shared.messages import LogTemplates, UserMessages

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

COGS: tuple[str, ...] = (
    "discord_music_queue.infrastructure.discord.cogs.music_cog",
    "discord_music_queue.infrastructure.discord.cogs.voice_events_cog",
)


class MusicBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs,
    ) -> None:
        intents = discord.Intents.default()
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        self._shutdown_started = False
        container.set_bot(self)

    async def setup_hook(self) -> None:
        await self.container.initialize()
        await self._load_cogs()
        self.tree.on_error = self._on_app_command_error

        if self.settings.discord.sync_on_startup:
            await self._sync_commands()

    async def _load_cogs(self) -> None:
        for cog in COGS:
            try:
                await self.load_extension(cog)
                logger.info(LogTemplates.EXTENSION_LOADED, cog)
            except Exception:
                logger.exception(LogTemplates.EXTENSION_LOAD_FAILED, cog)

    async def _sync_commands(self) -> None:
        try:
            for guild_id in self.settings.discord.guild_ids:
                synced = await self.tree.sync(guild=discord.Object(id=guild_id))
                logger.info(LogTemplates.COMMANDS_SYNCED_GUILD, len(synced), guild_id)
            synced = await self.tree.sync()
            logger.info(LogTemplates.COMMANDS_SYNCED_GLOBAL, len(synced))
        except discord.HTTPException:
            logger.exception(LogTemplates.COMMANDS_SYNC_FAILED)

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: Exception
    ) -> None:
        """Global slash-command error handler; replies ephemerally to avoid channel spam."""
        original = getattr(error, "original", error)
        logger.error(
            LogTemplates.SLASH_COMMAND_ERROR,
            getattr(interaction.command, "name", "<unknown>"),
            original,
        )

        try:
            if interaction.response.is_done():
                await interaction.followup.send(UserMessages.ERROR_COMMAND_FAILED, ephemeral=True)
            else:
                await interaction.response.send_message(
                    UserMessages.ERROR_COMMAND_FAILED, ephemeral=True
                )
        except discord.HTTPException as e:
            logger.warning(LogTemplates.NOTICE_SEND_FAILED, e)

    async def on_ready(self) -> None:
        if self.user is not None:
            logger.info(LogTemplates.BOT_LOGGED_IN, self.user, self.user.id)
        logger.info(LogTemplates.BOT_CONNECTED_GUILDS, len(self.guilds))

        activity = discord.Activity(type=discord.ActivityType.listening, name="/play")
        await self.change_presence(activity=activity)

    async def close(self) -> None:
        """Announce the restart to every active session, tear them down, disconnect."""
        if self._shutdown_started:
            return
        self._shutdown_started = True
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)

        timeout = self.settings.restart.shutdown_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                await self.container.shutdown()
        except TimeoutError:
            logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, timeout)
        except Exception:
            logger.exception(LogTemplates.BOT_SHUTDOWN_ERROR)

        await super().close()

    def run_with_graceful_shutdown(self, token: str) -> None:
        async def runner() -> None:
            async with self:
                loop = asyncio.get_running_loop()

                def _on_signal(sig: signal.Signals) -> None:
                    logger.info(LogTemplates.BOT_RECEIVED_SIGNAL, sig.name)
                    loop.create_task(self.close())

                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, _on_signal, sig)
                await self.start(token)

        asyncio.run(runner())


def create_bot(container: Container, settings: Settings) -> MusicBot:
    return MusicBot(container=container, settings=settings)
