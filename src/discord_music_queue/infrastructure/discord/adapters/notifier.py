"""Notifier implementation that posts to a Discord text channel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from discord_music_queue.application.interfaces.notifier import Notifier
from discord_music_queue.domain.shared.messages import LogTemplates, UserMessages

if TYPE_CHECKING:
    from discord_music_queue.domain.playback.media_item import MediaItem

logger = logging.getLogger(__name__)


def build_item_embed(item: MediaItem, title: str, color: discord.Color) -> discord.Embed:
    embed = discord.Embed(title=title, description=item.display_title, color=color)
    if item.image:
        embed.set_thumbnail(url=item.image)
    return embed


class DiscordNotifier(Notifier):
    def __init__(self, channel: discord.abc.Messageable) -> None:
        self._channel = channel

    async def now_playing(self, item: MediaItem) -> discord.Message:
        embed = build_item_embed(item, UserMessages.NOW_PLAYING_TITLE, discord.Color.green())
        return await self._channel.send(embed=embed)

    async def previously_played(self, notice: discord.Message, item: MediaItem) -> None:
        embed = build_item_embed(item, UserMessages.PREVIOUSLY_PLAYED_TITLE, discord.Color.gold())
        await notice.edit(embed=embed)

    async def delete(self, notice: discord.Message) -> None:
        await notice.delete()

    async def error(self, message: str) -> None:
        try:
            await self._channel.send(message)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.NOTICE_SEND_FAILED, e)

    async def announce(self, message: str) -> None:
        await self._channel.send(message)
