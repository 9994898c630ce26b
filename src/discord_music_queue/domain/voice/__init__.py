"""Voice bounded context: connectivity of one voice session."""

from discord_music_queue.domain.voice.session import VoiceSession
from discord_music_queue.domain.voice.value_objects import (
    CLOSE_CODE_MOVED_OR_REMOVED,
    DisconnectReason,
    VoiceState,
    VoiceStatus,
)

__all__ = [
    "CLOSE_CODE_MOVED_OR_REMOVED",
    "DisconnectReason",
    "VoiceSession",
    "VoiceState",
    "VoiceStatus",
]
