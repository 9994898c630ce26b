"""Port interface for user-facing notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from discord_music_queue.domain.playback.media_item import MediaItem


class Notifier(ABC):
    """Text channel that receives playback notices.

    ``now_playing`` returns an opaque notice handle that later calls use to
    edit or delete the same notice.
    """

    @abstractmethod
    async def now_playing(self, item: MediaItem) -> Any:
        ...

    @abstractmethod
    async def previously_played(self, notice: Any, item: MediaItem) -> None:
        ...

    @abstractmethod
    async def delete(self, notice: Any) -> None:
        ...

    @abstractmethod
    async def error(self, message: str) -> None:
        ...

    @abstractmethod
    async def announce(self, message: str) -> None:
        ...
