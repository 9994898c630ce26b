"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice transport, audio sink, notifier)
- Audio (yt-dlp search and stream spawning)
"""
