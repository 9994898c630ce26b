"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_music_queue.application.interfaces.audio_sink import AudioSink
from discord_music_queue.application.interfaces.media_search import MediaSearch, SearchResult
from discord_music_queue.application.interfaces.notifier import Notifier
from discord_music_queue.application.interfaces.stream_opener import OpenedStream, StreamOpener
from discord_music_queue.application.interfaces.voice_transport import VoiceTransport

__all__ = [
    "AudioSink",
    "MediaSearch",
    "Notifier",
    "OpenedStream",
    "SearchResult",
    "StreamOpener",
    "VoiceTransport",
]
