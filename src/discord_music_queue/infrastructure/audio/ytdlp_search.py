"""MediaSearch implementation using the yt-dlp library."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_music_queue.application.interfaces.media_search import MediaSearch, SearchResult
from discord_music_queue.domain.shared.messages import LogTemplates
from discord_music_queue.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    CacheEntry,
    YtDlpEntryInfo,
    YtDlpOpts,
)

logger = logging.getLogger(__name__)

COLLECTION_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"[?&]list="),
    re.compile(r"/playlist\?"),
]


class YtDlpSearch(MediaSearch):
    """Search, metadata lookup and playlist expansion through yt-dlp.

    yt-dlp is blocking, so every extraction runs in a worker thread. Metadata
    lookups are cached per URL for ``CACHE_TTL`` seconds.
    """

    def __init__(self, opts: YtDlpOpts | None = None) -> None:
        self._base_opts = opts or YtDlpOpts()
        self._cache: dict[str, CacheEntry] = {}

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _extract(self, target: str, opts: YtDlpOpts) -> dict[str, Any] | None:
        with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
            data = ydl.extract_info(target, download=False)
        return dict(data) if isinstance(data, dict) else None

    @staticmethod
    def _entries(data: dict[str, Any] | None) -> list[YtDlpEntryInfo]:
        if data is None:
            return []
        entries = data.get("entries") or []
        if not isinstance(entries, list):
            entries = list(entries)
        return [YtDlpEntryInfo.model_validate(dict(e)) for e in entries if isinstance(e, dict)]

    @staticmethod
    def _to_result(info: YtDlpEntryInfo) -> SearchResult | None:
        url = info.canonical_url
        if not url:
            logger.debug(LogTemplates.SEARCH_NO_URL, info.title)
            return None
        return SearchResult(url=url, title=info.title, thumbnail=info.best_thumbnail)

    # ── Blocking helpers (worker thread) ───────────────────────────────

    def _search_sync(self, query: str) -> YtDlpEntryInfo | None:
        data = self._extract(f"ytsearch1:{query}", self._get_opts(extract_flat="in_playlist"))
        entries = self._entries(data)
        return entries[0] if entries else None

    def _lookup_sync(self, url: str) -> YtDlpEntryInfo | None:
        now = time.time()
        cached = self._cache.get(url)
        if cached is not None:
            if now - cached.cached_at < CACHE_TTL:
                logger.debug(LogTemplates.CACHE_HIT, url[:LOG_URL_TRUNCATE])
                return cached.info
            self._cache.pop(url, None)

        data = self._extract(url, self._get_opts())
        info = YtDlpEntryInfo.model_validate(data) if data is not None else None
        self._cache[url] = CacheEntry(info=info, cached_at=now)
        self._prune(now)
        return info

    def _expand_sync(self, url: str) -> list[YtDlpEntryInfo]:
        data = self._extract(url, self._get_opts(noplaylist=False, extract_flat="in_playlist"))
        return self._entries(data)

    def _prune(self, now: float) -> None:
        if len(self._cache) <= CACHE_MAX_SIZE:
            return
        expired = [k for k, entry in self._cache.items() if now - entry.cached_at >= CACHE_TTL]
        for k in expired:
            self._cache.pop(k, None)
        # Still over the limit: drop the oldest insertions.
        while len(self._cache) > CACHE_MAX_SIZE:
            self._cache.pop(next(iter(self._cache)))

    # ── MediaSearch ────────────────────────────────────────────────────

    async def search_one(self, query: str) -> SearchResult | None:
        try:
            info = await asyncio.to_thread(self._search_sync, query)
        except Exception as e:
            logger.warning(LogTemplates.SEARCH_FAILED, query, e)
            return None
        return self._to_result(info) if info is not None else None

    async def lookup_metadata(self, url: str) -> SearchResult | None:
        try:
            info = await asyncio.to_thread(self._lookup_sync, url)
        except Exception as e:
            logger.warning(LogTemplates.LOOKUP_FAILED, url[:LOG_URL_TRUNCATE], e)
            return None
        return self._to_result(info) if info is not None else None

    async def expand_collection(self, url: str) -> list[SearchResult]:
        try:
            entries = await asyncio.to_thread(self._expand_sync, url)
        except Exception as e:
            logger.warning(LogTemplates.COLLECTION_FAILED, url[:LOG_URL_TRUNCATE], e)
            return []

        results: list[SearchResult] = []
        for entry in entries:
            result = self._to_result(entry)
            if result is not None:
                results.append(result)
        return results

    def is_collection(self, url: str) -> bool:
        return any(pattern.search(url) for pattern in COLLECTION_PATTERNS)

    def clear_cache(self) -> int:
        count = len(self._cache)
        self._cache.clear()
        return count
