"""Pydantic models for yt-dlp data and options.

These are infrastructure-specific models for parsing external yt-dlp data,
caching lookup results, and configuring yt-dlp options.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, field_validator

from discord_music_queue.domain.shared.types import (
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeFloat,
    PositiveInt,
)

CACHE_TTL: Final[int] = 3600
CACHE_MAX_SIZE: Final[int] = 500
DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
LOG_URL_TRUNCATE: Final[int] = 60


class YtDlpEntryInfo(BaseModel):
    """Trimmed yt-dlp extraction result: just what a queued item displays.

    Extra fields from yt-dlp are silently ignored. Before-validators coerce
    garbage from external yt-dlp data to None.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr | None = None
    thumbnail: HttpUrlStr | None = None
    thumbnails: list[dict[str, Any]] = []

    @field_validator("id", "webpage_url", "url", "title", "thumbnail", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("webpage_url", "thumbnail", mode="before")
    @classmethod
    def _drop_relative_urls(cls, v: Any) -> str | None:
        if isinstance(v, str) and v.startswith(("http://", "https://")):
            return v
        return None

    @field_validator("thumbnails", mode="before")
    @classmethod
    def _coerce_thumbnails(cls, v: Any) -> list[dict[str, Any]]:
        if not isinstance(v, list):
            return []
        return [t for t in v if isinstance(t, dict)]

    @property
    def canonical_url(self) -> str | None:
        """The page URL, falling back to the flat-playlist ``url`` field."""
        if self.webpage_url:
            return self.webpage_url
        if self.url and self.url.startswith(("http://", "https://")):
            return self.url
        if self.id:
            return f"https://www.youtube.com/watch?v={self.id}"
        return None

    @property
    def best_thumbnail(self) -> str | None:
        """``thumbnail`` or the last (largest) entry of ``thumbnails``."""
        if self.thumbnail:
            return self.thumbnail
        for entry in reversed(self.thumbnails):
            url = entry.get("url")
            if isinstance(url, str) and url.startswith(("http://", "https://")):
                return url
        return None


class CacheEntry(BaseModel):
    """Cached yt-dlp lookup result with its insertion timestamp."""

    model_config = ConfigDict(frozen=True)

    info: YtDlpEntryInfo | None = None
    cached_at: NonNegativeFloat


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
