"""Reusable interaction guards for slash commands."""

from discord_music_queue.infrastructure.discord.guards.voice_guards import (
    get_member,
    get_member_voice_channel,
    send_ephemeral,
)

__all__ = [
    "get_member",
    "get_member_voice_channel",
    "send_ephemeral",
]
