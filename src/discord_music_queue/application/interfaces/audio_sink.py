"""Port interface for the platform's audio playback primitive."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from discord_music_queue.domain.playback.media_item import MediaResource

EndCallback = Callable[[BaseException | None], None]


class AudioSink(ABC):
    """Plays one resource at a time into a voice connection."""

    @abstractmethod
    def play(self, resource: MediaResource, after: EndCallback) -> None:
        """Start streaming *resource*.

        *after* must be invoked on the event loop thread exactly once, with the
        error (or None) when the stream ends or is stopped.
        """
        ...

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def resume(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...
