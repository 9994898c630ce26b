"""Music subscription: one voice session, one player, one queue."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

from discord_music_queue.config.settings import VoiceSettings
from discord_music_queue.domain.playback.audio_player import AudioPlayer, PlayerState
from discord_music_queue.domain.playback.queue import PlaybackQueue
from discord_music_queue.domain.playback.value_objects import PlayerStatus, QueuePosition
from discord_music_queue.domain.shared.exceptions import (
    ConnectionTimeoutError,
    MediaError,
    PlaybackError,
    RejoinExhaustedError,
    ResolutionFailureError,
    SessionError,
    SessionRemovedError,
)
from discord_music_queue.domain.shared.messages import LogTemplates
from discord_music_queue.domain.voice.value_objects import VoiceState, VoiceStatus

if TYPE_CHECKING:
    from discord_music_queue.application.interfaces.notifier import Notifier
    from discord_music_queue.application.services.media_resolver import MediaResolver
    from discord_music_queue.domain.playback.media_item import MediaItem, MediaResource
    from discord_music_queue.domain.voice.session import VoiceSession

logger = logging.getLogger(__name__)


class MusicSubscription:
    """Binds a voice session, an audio player and a playback queue.

    Everything runs on one event loop, so ``queue_lock`` and ``ready_lock``
    are plain flags: no critical section spans an await. ``queue_sealed`` is
    the permanent variant of ``queue_lock`` set by a forced stop.
    """

    def __init__(
        self,
        key: int,
        *,
        session: VoiceSession,
        resolver: MediaResolver,
        notifier: Notifier | None = None,
        voice_settings: VoiceSettings | None = None,
        player: AudioPlayer | None = None,
        on_destroyed: Callable[[MusicSubscription], None] | None = None,
    ) -> None:
        self.key = key
        self.session = session
        self.notifier = notifier
        self.player = player or AudioPlayer()
        self.queue = PlaybackQueue()

        self.queue_lock = False
        self.queue_sealed = False
        self.ready_lock = False

        self._resolver = resolver
        self._voice_settings = voice_settings or VoiceSettings()
        self._on_destroyed = on_destroyed
        self._torn_down = False

        # Item being resolved and the token of the drain that owns it.
        self._inflight: MediaItem | None = None
        self._drain_ticket: object | None = None

        self._drain_tasks: set[asyncio.Task[Any]] = set()
        self._policy_tasks: set[asyncio.Task[Any]] = set()
        self._ready_timer: asyncio.Task[Any] | None = None

        self.player.on_state_change(self._on_player_state_change)
        self.player.on_error(self._on_player_error)
        self.session.on_state_change(self._on_voice_state_change)
        if session.transport is not None:
            self.player.attach(session.transport.sink)

    @property
    def now_playing(self) -> MediaItem | None:
        resource = self.player.resource
        return resource.item if resource is not None else None

    @property
    def is_busy(self) -> bool:
        """A resource is active or a drain is resolving the next one."""
        return self.player.status.is_active or self.queue_lock

    @property
    def is_torn_down(self) -> bool:
        return self._torn_down

    # ── Queue ──────────────────────────────────────────────────────────

    def enqueue(self, item: MediaItem) -> QueuePosition:
        """Append *item* and kick off a drain.

        Returns the position the item occupies: 0 when it goes straight to an
        idle player, otherwise how many items play before it.
        """
        ahead = len(self.queue)
        if self.is_busy or self.queue_sealed:
            ahead += 1
        self.queue.append(item)
        logger.debug(LogTemplates.QUEUE_ITEM_ADDED, item.display_title, self.key, ahead)
        self._spawn_drain()
        return QueuePosition(ahead)

    async def drain(self) -> None:
        """Resolve the head item and hand it to the idle player.

        A failing item is reported through its error callback and the next
        item is tried, so one bad item never stalls the queue.
        """
        while True:
            if self.queue_lock or self.queue_sealed or not self.player.is_idle:
                return
            item = self.queue.pop()
            if item is None:
                return

            ticket = object()
            self.queue_lock = True
            self._drain_ticket = ticket
            self._inflight = item

            try:
                resource = await self._resolver.resolve(item)
            except MediaError as e:
                if not self._owns_drain(ticket):
                    logger.info(LogTemplates.QUEUE_RESOLUTION_ABANDONED, item.display_title, self.key)
                    return
                logger.warning(LogTemplates.QUEUE_RESOLUTION_FAILED, item.display_title, e.message)
                item.fire_error(e)
                self._release_drain()
                continue
            except Exception as e:
                if not self._owns_drain(ticket):
                    logger.info(LogTemplates.QUEUE_RESOLUTION_ABANDONED, item.display_title, self.key)
                    return
                logger.exception(LogTemplates.QUEUE_RESOLUTION_CRASHED, item.display_title)
                item.fire_error(ResolutionFailureError(item.query, str(e)))
                self._release_drain()
                continue

            if not self._owns_drain(ticket):
                # Stopped or skipped while resolving: never reaches the player.
                logger.info(LogTemplates.QUEUE_RESOLUTION_ABANDONED, item.display_title, self.key)
                resource.close()
                return

            try:
                self.player.play(resource)
            finally:
                self._release_drain()
            return

    def stop(self, *, force: bool = False) -> int:
        """Clear the queue and stop playback.

        Returns how many items were removed, counting the one playing or being
        resolved. With *force* the queue is sealed and never drains again.
        """
        if force:
            self.queue_sealed = True

        cleared = len(self.queue.clear())
        if self._abandon_inflight() is not None:
            cleared += 1
        if self.player.stop():
            cleared += 1

        logger.info(LogTemplates.QUEUE_STOPPED, self.key, cleared, force)
        return cleared

    def skip(self, count: int = 1) -> int:
        """Skip *count* items, starting with the current one.

        Returns how many items were actually skipped.
        """
        if count < 1:
            return 0

        skipped = 0
        abandoned = self._abandon_inflight()
        if abandoned is not None or self.player.resource is not None:
            skipped += 1

        skipped += len(self.queue.drop_head(count - skipped))
        if not self.player.stop() and abandoned is not None:
            # Nothing left the player, so nothing else will trigger the next drain.
            self._spawn_drain()

        logger.info(LogTemplates.QUEUE_SKIPPED, self.key, skipped)
        return skipped

    def pause(self) -> bool:
        return self.player.pause()

    def resume(self) -> bool:
        return self.player.unpause()

    def _owns_drain(self, ticket: object) -> bool:
        return self._drain_ticket is ticket

    def _release_drain(self) -> None:
        self.queue_lock = False
        self._drain_ticket = None
        self._inflight = None

    def _abandon_inflight(self) -> MediaItem | None:
        """Detach a pending resolution; it cleans up after itself when it lands."""
        item = self._inflight
        if item is not None:
            self._release_drain()
        return item

    # ── Player events ──────────────────────────────────────────────────

    def _on_player_state_change(self, old: PlayerState, new: PlayerState) -> None:
        if new.status == PlayerStatus.IDLE and old.status != PlayerStatus.IDLE:
            if old.resource is not None:
                old.resource.item.fire_finish()
            self._spawn_drain()
        elif new.status == PlayerStatus.PLAYING and new.resource is not None:
            new.resource.item.fire_start()

    def _on_player_error(self, error: PlaybackError, resource: MediaResource) -> None:
        resource.item.fire_error(error)

    # ── Voice session policy ───────────────────────────────────────────

    def _on_voice_state_change(self, old: VoiceState, new: VoiceState) -> None:
        if new.status == VoiceStatus.DISCONNECTED:
            # The rejoin backoff owns the session from here; each rejoin arms a fresh window.
            self._disarm_ready_timer()
            self._spawn_policy(self._handle_disconnect(new))
        elif new.status == VoiceStatus.DESTROYED:
            self.teardown()
        elif new.status.is_pending and not self.ready_lock:
            # Taken synchronously so a second transition cannot arm another timer.
            self.ready_lock = True
            self._ready_timer = self._spawn_policy(self._await_ready())

    def _disarm_ready_timer(self) -> None:
        timer, self._ready_timer = self._ready_timer, None
        self.ready_lock = False
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()

    async def _handle_disconnect(self, state: VoiceState) -> None:
        settings = self._voice_settings

        if state.may_be_channel_move:
            # Same close code for "moved" and "kicked": give a move time to show up.
            try:
                await self.session.wait_for(VoiceStatus.CONNECTING, settings.move_grace_seconds)
                logger.info(LogTemplates.VOICE_CHANNEL_MOVED, self.key)
            except ConnectionTimeoutError:
                await self._end_session(SessionRemovedError())
        elif self.session.rejoin_attempts < settings.max_rejoin_attempts:
            delay = (self.session.rejoin_attempts + 1) * settings.rejoin_backoff_seconds
            logger.info(LogTemplates.VOICE_REJOIN_SCHEDULED, self.key, delay)
            await asyncio.sleep(delay)
            await self.session.rejoin()
        else:
            await self._end_session(RejoinExhaustedError(self.session.rejoin_attempts))

    async def _await_ready(self) -> None:
        try:
            await self.session.wait_for(
                VoiceStatus.READY, self._voice_settings.ready_timeout_seconds
            )
        except ConnectionTimeoutError as e:
            if not self.session.is_destroyed:
                await self._end_session(e)
        finally:
            if self._ready_timer is asyncio.current_task():
                self._ready_timer = None
                self.ready_lock = False

    async def _end_session(self, cause: SessionError) -> None:
        logger.warning(LogTemplates.SESSION_ENDING, self.key, cause.code, cause.message)
        await self.session.destroy()

    def teardown(self) -> None:
        """Force-stop and detach from the registry. Idempotent."""
        if self._torn_down:
            return
        self._torn_down = True

        self.stop(force=True)

        current = asyncio.current_task()
        for task in list(self._policy_tasks):
            if task is not current:
                task.cancel()

        logger.info(LogTemplates.SESSION_TORN_DOWN, self.key)
        if self._on_destroyed is not None:
            self._on_destroyed(self)

    # ── Task bookkeeping ───────────────────────────────────────────────

    def _spawn_drain(self) -> None:
        if self.queue_sealed:
            return
        self._track(self._drain_tasks, self.drain())

    def _spawn_policy(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[Any]:
        return self._track(self._policy_tasks, coro)

    @staticmethod
    def _track(
        bucket: set[asyncio.Task[Any]], coro: Coroutine[Any, Any, None]
    ) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        bucket.add(task)
        task.add_done_callback(bucket.discard)
        return task
