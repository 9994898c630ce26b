"""StreamOpener implementation that pipes audio out of a yt-dlp subprocess."""

from __future__ import annotations

import asyncio
import io
import logging
import subprocess
import sys
from typing import IO, Final

from discord_music_queue.application.interfaces.stream_opener import OpenedStream, StreamOpener
from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.playback.value_objects import StreamType
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_music_queue.infrastructure.audio.models import LOG_URL_TRUNCATE

logger = logging.getLogger(__name__)

EBML_MAGIC: Final[bytes] = b"\x1a\x45\xdf\xa3"
OGG_MAGIC: Final[bytes] = b"OggS"
WEBM_OPUS_CODEC: Final[bytes] = b"A_OPUS"
OGG_OPUS_HEAD: Final[bytes] = b"OpusHead"


def detect_stream_type(head: bytes) -> StreamType:
    """Classify a stream from its first bytes."""
    if head.startswith(EBML_MAGIC) and WEBM_OPUS_CODEC in head:
        return StreamType.WEBM_OPUS
    if head.startswith(OGG_MAGIC) and OGG_OPUS_HEAD in head:
        return StreamType.OGG_OPUS
    return StreamType.ARBITRARY


class ReplayStream(io.RawIOBase):
    """Replays already-read bytes before continuing with the wrapped pipe."""

    def __init__(self, head: bytes, source: IO[bytes]) -> None:
        super().__init__()
        self._head = head
        self._source = source

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        if self._head:
            n = min(len(buffer), len(self._head))
            buffer[:n] = self._head[:n]
            self._head = self._head[n:]
            return n
        data = self._source.read(len(buffer))
        if not data:
            return 0
        buffer[: len(data)] = data
        return len(data)

    def close(self) -> None:
        try:
            self._source.close()
        finally:
            super().close()


class YtDlpStreamOpener(StreamOpener):
    """Spawns ``yt-dlp -o -`` and probes the container it writes."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()

    def build_command(self, url: str) -> list[str]:
        return [
            sys.executable,
            "-m",
            "yt_dlp",
            "-o",
            "-",
            "-q",
            "-f",
            self._settings.ytdlp_format,
            "-r",
            self._settings.rate_limit,
            url,
        ]

    def _spawn(self, url: str) -> subprocess.Popen[bytes]:
        return subprocess.Popen(
            self.build_command(url),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )

    async def open(self, url: str) -> OpenedStream:
        process = await asyncio.to_thread(self._spawn, url)
        if process.stdout is None:
            process.kill()
            raise OSError(ErrorMessages.STREAM_OPEN_FAILED.format(error="no stdout"))
        logger.debug(LogTemplates.STREAM_SPAWNED, process.pid, url[:LOG_URL_TRUNCATE])
        return OpenedStream(stream=process.stdout, process=process)

    async def probe(self, opened: OpenedStream) -> StreamType:
        """Read the head of the stream and classify it.

        The bytes read are replayed, so the stream handed to the player still
        starts at offset zero.
        """
        source = opened.stream
        head = await asyncio.wait_for(
            asyncio.to_thread(source.read, self._settings.probe_bytes),
            timeout=self._settings.probe_timeout_seconds,
        )
        if not head:
            raise EOFError(ErrorMessages.STREAM_ENDED_EARLY)

        stream_type = detect_stream_type(head)
        logger.debug(LogTemplates.STREAM_PROBED, head[:4], stream_type.value)
        opened.stream = io.BufferedReader(ReplayStream(head, source))
        return stream_type
