"""
Shared Domain Kernel

Contains exceptions and message constants shared across all bounded contexts.
"""

from discord_music_queue.domain.shared.exceptions import (
    ConnectionTimeoutError,
    DomainError,
    InvalidOperationError,
    MediaError,
    PlaybackError,
    RejoinExhaustedError,
    ResolutionFailureError,
    SessionError,
    SessionRemovedError,
    UnsupportedSourceError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "MediaError",
    "UnsupportedSourceError",
    "ResolutionFailureError",
    "PlaybackError",
    "SessionError",
    "ConnectionTimeoutError",
    "SessionRemovedError",
    "RejoinExhaustedError",
]
