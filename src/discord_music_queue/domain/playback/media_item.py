"""Media items, their one-shot lifecycle callbacks, and resolved resources."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any, Protocol

from discord_music_queue.domain.playback.value_objects import StreamType
from discord_music_queue.domain.shared.exceptions import MediaError
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

CallbackResult = Awaitable[None] | None
ItemCallback = Callable[["MediaItem"], CallbackResult]
ErrorCallback = Callable[["MediaItem", MediaError], CallbackResult]

# Strong references to callback coroutines scheduled from sync code.
_background_tasks: set[asyncio.Task[Any]] = set()


class LifecycleEvent(Enum):
    """The three lifecycle slots of a media item."""

    START = "start"
    FINISH = "finish"
    ERROR = "error"


@dataclass(frozen=True)
class MediaCallbacks:
    """Fixed callback slots. Any slot may be left empty."""

    on_start: ItemCallback | None = None
    on_finish: ItemCallback | None = None
    on_error: ErrorCallback | None = None


class MediaItem:
    """A queued playback request.

    ``title`` and ``image`` may be unknown at enqueue time; resolution fills
    them in. Each callback slot fires at most once and finish/error are
    mutually exclusive: whichever settles the item first wins.
    """

    def __init__(
        self,
        query: str,
        title: str | None = None,
        image: str | None = None,
        callbacks: MediaCallbacks | None = None,
    ) -> None:
        if not query or not query.strip():
            raise ValueError(ErrorMessages.EMPTY_QUERY)
        self.query = query.strip()
        self.title = title
        self.image = image
        self.callbacks = callbacks or MediaCallbacks()
        self.fired: set[LifecycleEvent] = set()

    def __repr__(self) -> str:
        return f"MediaItem(query={self.query!r}, title={self.title!r})"

    @property
    def display_title(self) -> str:
        return self.title or self.query

    @property
    def is_settled(self) -> bool:
        """True once either the finish or the error slot has fired."""
        return LifecycleEvent.FINISH in self.fired or LifecycleEvent.ERROR in self.fired

    def fire_start(self) -> bool:
        """Fire ``on_start`` unless it already fired or the item is settled."""
        if LifecycleEvent.START in self.fired or self.is_settled:
            return False
        self.fired.add(LifecycleEvent.START)
        self._dispatch(LifecycleEvent.START, self.callbacks.on_start)
        return True

    def fire_finish(self) -> bool:
        """Fire ``on_finish`` unless the item is already settled."""
        if self.is_settled:
            return False
        self.fired.add(LifecycleEvent.FINISH)
        self._dispatch(LifecycleEvent.FINISH, self.callbacks.on_finish)
        return True

    def fire_error(self, error: MediaError) -> bool:
        """Fire ``on_error`` unless the item is already settled."""
        if self.is_settled:
            return False
        self.fired.add(LifecycleEvent.ERROR)
        self._dispatch(LifecycleEvent.ERROR, self.callbacks.on_error, error)
        return True

    def _dispatch(self, event: LifecycleEvent, callback: Callable[..., Any] | None, *args: Any) -> None:
        if callback is None:
            return

        try:
            result = callback(self, *args)
        except Exception:
            logger.exception(LogTemplates.ITEM_CALLBACK_FAILED, event.value, self.display_title)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            _background_tasks.add(task)
            task.add_done_callback(_background_tasks.discard)
            task.add_done_callback(lambda t: _log_callback_failure(t, event, self))


def _log_callback_failure(task: asyncio.Future[Any], event: LifecycleEvent, item: MediaItem) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(LogTemplates.ITEM_CALLBACK_FAILED_ASYNC, event.value, item.display_title, exc)


class ProcessHandle(Protocol):
    """The subset of ``subprocess.Popen`` a resource needs for cleanup."""

    def poll(self) -> int | None: ...

    def kill(self) -> None: ...

    def wait(self, timeout: float | None = None) -> int: ...


class MediaResource:
    """A ready-to-stream resource, tagged with the item it was resolved from."""

    def __init__(
        self,
        item: MediaItem,
        stream: IO[bytes],
        stream_type: StreamType,
        process: ProcessHandle | None = None,
    ) -> None:
        self.item = item
        self.stream = stream
        self.stream_type = stream_type
        self.process = process
        self.closed = False

    def __repr__(self) -> str:
        return f"MediaResource(item={self.item!r}, stream_type={self.stream_type.value})"

    def close(self) -> None:
        """Kill the producing process and close the pipe. Never raises."""
        if self.closed:
            return
        self.closed = True

        if self.process is not None:
            try:
                if self.process.poll() is None:
                    self.process.kill()
                    self.process.wait(timeout=1.0)
            except Exception as e:
                logger.debug(LogTemplates.RESOURCE_PROCESS_CLEANUP_ERROR, e)

        try:
            self.stream.close()
        except Exception as e:
            logger.debug(LogTemplates.RESOURCE_STREAM_CLEANUP_ERROR, e)
