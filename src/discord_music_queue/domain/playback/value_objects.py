"""Immutable value objects for the playback bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from discord_music_queue.domain.shared.messages import ErrorMessages


class PlayerStatus(Enum):
    """States of the single playback slot."""

    IDLE = "idle"
    BUFFERING = "buffering"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlayerStatus) -> bool:
        """Check whether moving from this status to *target* is allowed."""
        # Anything can be stopped.
        if target == PlayerStatus.IDLE:
            return True
        return target in _PLAYER_TRANSITIONS[self]

    @property
    def is_active(self) -> bool:
        """True while a resource occupies the slot."""
        return self != PlayerStatus.IDLE


_PLAYER_TRANSITIONS: dict[PlayerStatus, frozenset[PlayerStatus]] = {
    PlayerStatus.IDLE: frozenset({PlayerStatus.BUFFERING}),
    PlayerStatus.BUFFERING: frozenset({PlayerStatus.PLAYING}),
    PlayerStatus.PLAYING: frozenset({PlayerStatus.PAUSED}),
    PlayerStatus.PAUSED: frozenset({PlayerStatus.PLAYING}),
}


class StreamType(Enum):
    """Container detected when probing a freshly opened stream."""

    WEBM_OPUS = "webm/opus"
    OGG_OPUS = "ogg/opus"
    ARBITRARY = "arbitrary"

    @property
    def is_opus(self) -> bool:
        """Opus containers can be passed through without re-encoding."""
        return self in (StreamType.WEBM_OPUS, StreamType.OGG_OPUS)


@dataclass(frozen=True)
class QueuePosition:
    """Zero-based position an item occupied when it was enqueued."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(ErrorMessages.INVALID_QUEUE_POSITION)

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    @property
    def plays_immediately(self) -> bool:
        return self.value == 0
