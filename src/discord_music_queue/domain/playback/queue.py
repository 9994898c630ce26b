"""FIFO queue of pending media items."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from discord_music_queue.domain.playback.media_item import MediaItem


class PlaybackQueue:
    """Ordered pending items.

    Only the tail grows and only the head shrinks. Order is whatever the
    caller handed in; the queue never reorders.
    """

    def __init__(self) -> None:
        self._items: deque[MediaItem] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[MediaItem]:
        return iter(self._items)

    def append(self, item: MediaItem) -> int:
        """Add *item* to the tail and return its index in the queue."""
        self._items.append(item)
        return len(self._items) - 1

    def pop(self) -> MediaItem | None:
        """Remove and return the head item, or None when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def peek(self) -> MediaItem | None:
        return self._items[0] if self._items else None

    def drop_head(self, count: int) -> list[MediaItem]:
        """Remove up to *count* items from the head and return them."""
        dropped: list[MediaItem] = []
        while self._items and len(dropped) < count:
            dropped.append(self._items.popleft())
        return dropped

    def clear(self) -> list[MediaItem]:
        """Remove everything and return what was removed, in order."""
        removed = list(self._items)
        self._items.clear()
        return removed

    def snapshot(self, limit: int | None = None) -> list[MediaItem]:
        """Return up to *limit* pending items without mutating the queue."""
        items = list(self._items)
        return items if limit is None else items[:limit]
