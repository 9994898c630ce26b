"""Event cog forwarding the bot's own voice-state updates to its voice transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_music_queue.domain.shared.messages import ErrorMessages
from discord_music_queue.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceTransport,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class VoiceEventsCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        if self.bot.user is None or member.id != self.bot.user.id:
            return

        subscription = self.container.registry.get(member.guild.id)
        if subscription is None:
            return

        transport = subscription.session.transport
        if isinstance(transport, DiscordVoiceTransport):
            transport.handle_voice_state_update(before, after)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(VoiceEventsCog(bot, container))
