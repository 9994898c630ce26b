"""Resolution of queued media items into streamable resources."""

from __future__ import annotations

import asyncio
import html
import logging
import re
from typing import TYPE_CHECKING, Final

from discord_music_queue.domain.playback.media_item import MediaItem, MediaResource
from discord_music_queue.domain.shared.exceptions import (
    MediaError,
    ResolutionFailureError,
    UnsupportedSourceError,
)
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_music_queue.application.interfaces.media_search import MediaSearch
    from discord_music_queue.application.interfaces.stream_opener import (
        OpenedStream,
        StreamOpener,
    )

logger = logging.getLogger(__name__)

URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://", re.IGNORECASE)

SUPPORTED_SOURCE_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://(?:www\.|m\.|music\.)?youtube\.com/(?:watch\?|shorts/|embed/)", re.I),
    re.compile(r"^https?://youtu\.be/[\w-]+", re.I),
]

_MARKUP_TAG: Final[re.Pattern[str]] = re.compile(r"<[^>]+>")


def sanitize_text(text: str) -> str:
    """Strip markup tags, decode entities and collapse whitespace."""
    text = _MARKUP_TAG.sub("", text)
    text = html.unescape(text)
    return " ".join(text.split())


def is_url(query: str) -> bool:
    return bool(URL_PATTERN.match(query))


def is_supported_source(url: str) -> bool:
    return any(pattern.match(url) for pattern in SUPPORTED_SOURCE_PATTERNS)


class MediaResolver:
    """Turns a media item into a ready-to-stream resource.

    Direct URLs must point at a supported source; anything else is treated as
    a search query. Missing title/thumbnail are looked up before the stream
    is opened, so display metadata is complete by the time playback starts.
    """

    def __init__(self, *, search: MediaSearch, stream_opener: StreamOpener) -> None:
        self._search = search
        self._stream_opener = stream_opener

    async def resolve(self, item: MediaItem) -> MediaResource:
        """Resolve *item*.

        Raises:
            UnsupportedSourceError: The query is a URL we cannot stream.
            ResolutionFailureError: Search, lookup, spawn or probe failed.
        """
        url = await self._canonical_url(item)
        await self._fill_metadata(item, url)

        if item.title:
            item.title = sanitize_text(item.title) or item.query

        try:
            opened = await self._stream_opener.open(url)
        except MediaError:
            raise
        except Exception as e:
            raise ResolutionFailureError(
                item.query, ErrorMessages.STREAM_OPEN_FAILED.format(error=e)
            ) from e

        try:
            stream_type = await self._stream_opener.probe(opened)
        except asyncio.CancelledError:
            _discard(opened)
            raise
        except Exception as e:
            _discard(opened)
            raise ResolutionFailureError(
                item.query, ErrorMessages.STREAM_PROBE_FAILED.format(error=e)
            ) from e

        logger.info(LogTemplates.RESOLVED_ITEM, item.display_title, stream_type.value)
        return MediaResource(item, opened.stream, stream_type, opened.process)

    async def _canonical_url(self, item: MediaItem) -> str:
        if is_url(item.query):
            if not is_supported_source(item.query):
                raise UnsupportedSourceError(item.query)
            return item.query

        try:
            result = await self._search.search_one(item.query)
        except Exception as e:
            raise ResolutionFailureError(item.query) from e

        if result is None:
            raise ResolutionFailureError(item.query)

        item.title = item.title or result.title
        item.image = item.image or result.thumbnail
        return result.url

    async def _fill_metadata(self, item: MediaItem, url: str) -> None:
        if item.title and item.image:
            return

        try:
            info = await self._search.lookup_metadata(url)
        except Exception as e:
            raise ResolutionFailureError(item.query) from e

        if info is None:
            raise ResolutionFailureError(item.query)

        item.title = item.title or info.title
        item.image = item.image or info.thumbnail


def _discard(opened: OpenedStream) -> None:
    """Best-effort kill of a stream that will never be played."""
    process = opened.process
    if process is not None:
        try:
            if process.poll() is None:
                process.kill()
        except Exception as e:
            logger.debug(LogTemplates.RESOURCE_PROCESS_CLEANUP_ERROR, e)
    try:
        opened.stream.close()
    except Exception as e:
        logger.debug(LogTemplates.RESOURCE_STREAM_CLEANUP_ERROR, e)
