"""Slash-command cog mapping music commands onto the subscription registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_music_queue.application.services.registry_models import OperationResult, QueueSnapshot
from discord_music_queue.domain.shared.messages import ErrorMessages, UserMessages
from discord_music_queue.infrastructure.discord.adapters.notifier import DiscordNotifier
from discord_music_queue.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceTransport,
)
from discord_music_queue.infrastructure.discord.guards.voice_guards import (
    get_member_voice_channel,
    send_ephemeral,
)

if TYPE_CHECKING:
    from ....application.services.subscription import MusicSubscription
    from ....application.services.subscription_registry import SubscriptionRegistry
    from ....config.container import Container

logger = logging.getLogger(__name__)


def build_queue_embed(snapshot: QueueSnapshot) -> discord.Embed:
    embed = discord.Embed(title=UserMessages.QUEUE_TITLE, color=discord.Color.blurple())
    lines: list[str] = []
    if snapshot.now_playing:
        lines.append(UserMessages.QUEUE_NOW_PLAYING.format(title=snapshot.now_playing))
    for position, title in enumerate(snapshot.pending, start=1):
        lines.append(UserMessages.QUEUE_ENTRY.format(position=position, title=title))
    if snapshot.hidden_count > 0:
        lines.append(UserMessages.QUEUE_MORE.format(count=snapshot.hidden_count))
    embed.description = "\n".join(lines) or UserMessages.QUEUE_EMPTY
    return embed


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def registry(self) -> SubscriptionRegistry:
        return self.container.registry

    async def _join(self, interaction: discord.Interaction) -> MusicSubscription | None:
        channel = await get_member_voice_channel(interaction)
        if channel is None or interaction.guild is None:
            return None

        transport = DiscordVoiceTransport(
            interaction.guild, channel, self.container.settings.voice
        )
        notifier = DiscordNotifier(interaction.channel)  # type: ignore[arg-type]
        subscription = await self.registry.join(interaction.guild.id, transport, notifier)
        if subscription is None:
            await send_ephemeral(interaction, UserMessages.ERROR_COULD_NOT_JOIN_VOICE)
        return subscription

    @staticmethod
    async def _reply(interaction: discord.Interaction, result: OperationResult) -> None:
        if interaction.response.is_done():
            await interaction.followup.send(result.message, ephemeral=not result.is_success)
        else:
            await interaction.response.send_message(
                result.message, ephemeral=not result.is_success
            )

    # ─────────────────────────────────────────────────────────────────
    # Queueing
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="YouTube URL, playlist URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        await interaction.response.defer()
        if await self._join(interaction) is None or interaction.guild is None:
            return

        if self.container.media_search.is_collection(query):
            result = await self.registry.enqueue_collection(interaction.guild.id, query)
        else:
            result = await self.registry.enqueue(interaction.guild.id, query)
        await self._reply(interaction, result)

    @app_commands.command(name="playlist", description="Queue every track of a playlist.")
    @app_commands.describe(url="Playlist URL", shuffle="Shuffle the tracks before queueing")
    async def playlist(
        self, interaction: discord.Interaction, url: str, shuffle: bool = False
    ) -> None:
        if not self.container.media_search.is_collection(url):
            await send_ephemeral(interaction, UserMessages.ERROR_NOT_A_COLLECTION)
            return

        await interaction.response.defer()
        if await self._join(interaction) is None or interaction.guild is None:
            return

        result = await self.registry.enqueue_collection(
            interaction.guild.id, url, shuffle=shuffle
        )
        await self._reply(interaction, result)

    @app_commands.command(name="queue", description="Show the upcoming tracks.")
    async def queue(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, UserMessages.ERROR_NOT_IN_GUILD)
            return

        snapshot = await self.registry.queue_snapshot(interaction.guild.id)
        if not snapshot.active:
            await send_ephemeral(interaction, UserMessages.NOT_ACTIVE)
            return
        await interaction.response.send_message(embed=build_queue_embed(snapshot))

    # ─────────────────────────────────────────────────────────────────
    # Playback control
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the current track.")
    @app_commands.describe(count="How many tracks to skip, starting with the current one")
    async def skip(
        self, interaction: discord.Interaction, count: app_commands.Range[int, 1, 100] = 1
    ) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, UserMessages.ERROR_NOT_IN_GUILD)
            return
        await self._reply(interaction, await self.registry.skip(interaction.guild.id, count))

    @app_commands.command(name="stop", description="Stop playback and clear the queue.")
    async def stop(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, UserMessages.ERROR_NOT_IN_GUILD)
            return
        await self._reply(interaction, await self.registry.stop(interaction.guild.id))

    @app_commands.command(name="pause", description="Pause playback.")
    async def pause(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, UserMessages.ERROR_NOT_IN_GUILD)
            return
        await self._reply(interaction, await self.registry.pause(interaction.guild.id))

    @app_commands.command(name="resume", description="Resume playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, UserMessages.ERROR_NOT_IN_GUILD)
            return
        await self._reply(interaction, await self.registry.resume(interaction.guild.id))

    @app_commands.command(name="leave", description="Leave the voice channel.")
    async def leave(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, UserMessages.ERROR_NOT_IN_GUILD)
            return
        await self._reply(interaction, await self.registry.leave(interaction.guild.id))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
