"""Audio infrastructure - yt-dlp search and stream spawning."""

from discord_music_queue.infrastructure.audio.models import CacheEntry, YtDlpEntryInfo, YtDlpOpts
from discord_music_queue.infrastructure.audio.ytdlp_search import YtDlpSearch
from discord_music_queue.infrastructure.audio.ytdlp_stream import (
    ReplayStream,
    YtDlpStreamOpener,
    detect_stream_type,
)

__all__ = [
    "CacheEntry",
    "ReplayStream",
    "YtDlpEntryInfo",
    "YtDlpOpts",
    "YtDlpSearch",
    "YtDlpStreamOpener",
    "detect_stream_type",
]
