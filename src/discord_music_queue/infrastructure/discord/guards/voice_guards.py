"""Voice-channel guard functions for Discord slash commands.

These are free functions that take the interaction explicitly, so any cog
can use them.
"""

from __future__ import annotations

import discord

from discord_music_queue.domain.shared.messages import UserMessages


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Return the invoking guild member, or None after telling the user why not."""
    if interaction.guild is None or not isinstance(interaction.user, discord.Member):
        await send_ephemeral(interaction, UserMessages.ERROR_NOT_IN_GUILD)
        return None
    return interaction.user


async def get_member_voice_channel(
    interaction: discord.Interaction,
) -> discord.VoiceChannel | discord.StageChannel | None:
    """Return the voice channel the invoking member sits in."""
    member = await get_member(interaction)
    if member is None:
        return None

    channel = member.voice.channel if member.voice else None
    if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
        await send_ephemeral(interaction, UserMessages.ERROR_USER_NOT_IN_VOICE)
        return None
    return channel
