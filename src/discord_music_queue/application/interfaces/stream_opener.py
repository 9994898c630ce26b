"""Port interface for opening and probing media streams."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import IO

from discord_music_queue.domain.playback.media_item import ProcessHandle
from discord_music_queue.domain.playback.value_objects import StreamType


@dataclass
class OpenedStream:
    """A byte pipe and the process producing it."""

    stream: IO[bytes]
    process: ProcessHandle | None = None


class StreamOpener(ABC):

    @abstractmethod
    async def open(self, url: str) -> OpenedStream:
        """Spawn the producer for *url* and return its output pipe."""
        ...

    @abstractmethod
    async def probe(self, opened: OpenedStream) -> StreamType:
        """Inspect the head of the stream without consuming it."""
        ...
