# ruff: noqa: N999
"""
Domain Layer

Contains pure playback logic organized by bounded contexts:
- shared/: Exceptions, message constants and constrained types
- playback/: Media items, the audio player and the pending queue
- voice/: Voice session connectivity state machine
"""

from discord_music_queue.domain.shared.exceptions import DomainError, MediaError, SessionError

__all__ = [
    "DomainError",
    "MediaError",
    "SessionError",
]
