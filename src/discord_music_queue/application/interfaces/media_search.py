"""Port interface for search and metadata lookups."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from discord_music_queue.domain.shared.types import HttpUrlStr, NonEmptyStr


class SearchResult(BaseModel):
    """A canonical URL plus whatever metadata the lookup produced."""

    model_config = ConfigDict(frozen=True)

    url: HttpUrlStr
    title: NonEmptyStr | None = None
    thumbnail: HttpUrlStr | None = None


class MediaSearch(ABC):
    """Interface for resolving queries to canonical media URLs."""

    @abstractmethod
    async def search_one(self, query: NonEmptyStr) -> SearchResult | None:
        """Return the best match for a free-text query."""
        ...

    @abstractmethod
    async def lookup_metadata(self, url: HttpUrlStr) -> SearchResult | None:
        """Return title and thumbnail for a canonical URL."""
        ...

    @abstractmethod
    async def expand_collection(self, url: HttpUrlStr) -> list[SearchResult]:
        """Enumerate the entries of a playlist or album URL, in source order."""
        ...

    @abstractmethod
    def is_collection(self, url: str) -> bool:
        ...
