"""Channel notices driven by a media item's lifecycle callbacks."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from discord_music_queue.domain.playback.media_item import MediaCallbacks, MediaItem
from discord_music_queue.domain.shared.messages import LogTemplates, UserMessages

if TYPE_CHECKING:
    from discord_music_queue.application.interfaces.notifier import Notifier
    from discord_music_queue.domain.shared.exceptions import MediaError

logger = logging.getLogger(__name__)


class ItemNotices:
    """Posts "now playing", turns it into "previously played", cleans up.

    One instance per item: it remembers the notice it posted so later
    callbacks edit or delete that same notice, even when they fire while
    the notice is still being posted.
    """

    def __init__(self, notifier: Notifier, *, expiry_seconds: float) -> None:
        self._notifier = notifier
        self._expiry_seconds = expiry_seconds
        self._posting: asyncio.Future[Any] | None = None

    def callbacks(self) -> MediaCallbacks:
        return MediaCallbacks(
            on_start=self._on_start,
            on_finish=self._on_finish,
            on_error=self._on_error,
        )

    async def _on_start(self, item: MediaItem) -> None:
        if self._posting is None:
            self._posting = asyncio.ensure_future(self._notifier.now_playing(item))
            await self._posting

    async def _take_notice(self) -> Any:
        """Wait for a pending post and hand over its notice, at most once."""
        posting, self._posting = self._posting, None
        if posting is None:
            return None
        try:
            return await posting
        except Exception as e:
            logger.debug(LogTemplates.NOTICE_SEND_FAILED, e)
            return None

    async def _on_finish(self, item: MediaItem) -> None:
        notice = await self._take_notice()
        if notice is None:
            return

        await self._notifier.previously_played(notice, item)
        await asyncio.sleep(self._expiry_seconds)
        await self._delete_quietly(notice)

    async def _on_error(self, item: MediaItem, error: MediaError) -> None:
        notice = await self._take_notice()
        if notice is not None:
            await self._delete_quietly(notice)
        await self._notifier.error(UserMessages.ITEM_ERROR.format(error=error.message))

    async def _delete_quietly(self, notice: Any) -> None:
        try:
            await self._notifier.delete(notice)
        except Exception as e:
            logger.debug(LogTemplates.NOTICE_DELETE_FAILED, e)
