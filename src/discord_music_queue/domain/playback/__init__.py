"""Playback bounded context: media items, the audio player and the queue."""

from discord_music_queue.domain.playback.audio_player import AudioPlayer, PlayerState
from discord_music_queue.domain.playback.media_item import (
    LifecycleEvent,
    MediaCallbacks,
    MediaItem,
    MediaResource,
)
from discord_music_queue.domain.playback.queue import PlaybackQueue
from discord_music_queue.domain.playback.value_objects import PlayerStatus, QueuePosition, StreamType

__all__ = [
    "AudioPlayer",
    "LifecycleEvent",
    "MediaCallbacks",
    "MediaItem",
    "MediaResource",
    "PlaybackQueue",
    "PlayerState",
    "PlayerStatus",
    "QueuePosition",
    "StreamType",
]
