"""Discord cogs - command and event handlers."""

from discord_music_queue.infrastructure.discord.cogs.music_cog import MusicCog
from discord_music_queue.infrastructure.discord.cogs.voice_events_cog import VoiceEventsCog

__all__ = [
    "MusicCog",
    "VoiceEventsCog",
]
