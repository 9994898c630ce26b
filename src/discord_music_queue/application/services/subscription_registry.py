"""Keyed registry of music subscriptions and the caller-facing entry points."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING

from discord_music_queue.application.services.item_notices import ItemNotices
from discord_music_queue.application.services.registry_models import (
    EnqueueResult,
    LeaveResult,
    OperationStatus,
    PlaybackResult,
    QueueSnapshot,
    SkipResult,
    StopResult,
)
from discord_music_queue.application.services.subscription import MusicSubscription
from discord_music_queue.config.settings import QueueSettings, VoiceSettings
from discord_music_queue.domain.playback.media_item import MediaItem
from discord_music_queue.domain.shared.messages import LogTemplates, UserMessages
from discord_music_queue.domain.voice.session import VoiceSession

if TYPE_CHECKING:
    from discord_music_queue.application.interfaces.media_search import MediaSearch
    from discord_music_queue.application.interfaces.notifier import Notifier
    from discord_music_queue.application.interfaces.voice_transport import VoiceTransport
    from discord_music_queue.application.services.media_resolver import MediaResolver

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Owns every active subscription, one per guild.

    Creation and removal are key-scoped and idempotent. Every entry point
    answers with a neutral "not active" result for unknown keys instead of
    raising.
    """

    def __init__(
        self,
        *,
        resolver: MediaResolver,
        search: MediaSearch,
        queue_settings: QueueSettings | None = None,
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        self._resolver = resolver
        self._search = search
        self._queue_settings = queue_settings or QueueSettings()
        self._voice_settings = voice_settings or VoiceSettings()
        self._subscriptions: dict[int, MusicSubscription] = {}
        self._join_locks: dict[int, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __contains__(self, key: object) -> bool:
        return key in self._subscriptions

    def get(self, key: int) -> MusicSubscription | None:
        return self._subscriptions.get(key)

    def active_keys(self) -> list[int]:
        return list(self._subscriptions)

    # ── Lifecycle ──────────────────────────────────────────────────────

    async def join(
        self, key: int, transport: VoiceTransport, notifier: Notifier
    ) -> MusicSubscription | None:
        """Return the live subscription for *key*, connecting a new one if needed.

        Returns None when the connection could not be established.
        """
        lock = self._join_locks.setdefault(key, asyncio.Lock())
        async with lock:
            existing = self._subscriptions.get(key)
            if existing is not None and not existing.is_torn_down:
                existing.notifier = notifier
                return existing

            session = VoiceSession(key, transport)
            subscription = MusicSubscription(
                key,
                session=session,
                resolver=self._resolver,
                notifier=notifier,
                voice_settings=self._voice_settings,
                on_destroyed=self._forget,
            )

            if not await session.connect():
                logger.warning(LogTemplates.SUBSCRIPTION_JOIN_FAILED, key)
                await session.destroy()
                return None

            if session.is_destroyed:
                return None

            self._subscriptions[key] = subscription
            logger.info(LogTemplates.SUBSCRIPTION_CREATED, key)
            return subscription

    def _forget(self, subscription: MusicSubscription) -> None:
        # Only drop the entry if it still belongs to this subscription.
        if self._subscriptions.get(subscription.key) is subscription:
            del self._subscriptions[subscription.key]
            logger.info(LogTemplates.SUBSCRIPTION_REMOVED, subscription.key)

        lock = self._join_locks.get(subscription.key)
        if lock is not None and not lock.locked():
            del self._join_locks[subscription.key]

    async def leave(self, key: int) -> LeaveResult:
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return LeaveResult.not_active()

        await subscription.session.destroy()
        # Covers a session that was already destroyed before teardown ran.
        subscription.teardown()
        return LeaveResult.success()

    async def shutdown(self, notice: str) -> int:
        """Announce *notice* once per active session, then tear everything down."""
        subscriptions = list(self._subscriptions.values())

        for subscription in subscriptions:
            if subscription.notifier is None:
                continue
            try:
                await subscription.notifier.announce(notice)
            except Exception as e:
                logger.warning(LogTemplates.SHUTDOWN_ANNOUNCE_FAILED, subscription.key, e)

        for subscription in subscriptions:
            await subscription.session.destroy()
            subscription.teardown()

        logger.info(LogTemplates.SHUTDOWN_COMPLETE, len(subscriptions))
        return len(subscriptions)

    # ── Queue entry points ─────────────────────────────────────────────

    async def enqueue(
        self,
        key: int,
        query: str,
        title: str | None = None,
        image: str | None = None,
        *,
        notifier: Notifier | None = None,
    ) -> EnqueueResult:
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return EnqueueResult.not_active()

        if len(subscription.queue) >= self._queue_settings.max_queue_size:
            return EnqueueResult.error(
                OperationStatus.FAILED,
                UserMessages.QUEUE_FULL.format(limit=self._queue_settings.max_queue_size),
            )

        try:
            item = self._build_item(subscription, query, title, image, notifier)
        except ValueError as e:
            return EnqueueResult.error(OperationStatus.FAILED, str(e))

        position = subscription.enqueue(item)
        return EnqueueResult.queued(int(position), item.display_title)

    async def enqueue_collection(
        self,
        key: int,
        url: str,
        *,
        shuffle: bool = False,
        notifier: Notifier | None = None,
    ) -> EnqueueResult:
        """Expand a playlist/album URL and enqueue its entries.

        Shuffling happens here, before the queue ever sees the items.
        """
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return EnqueueResult.not_active()

        entries = await self._search.expand_collection(url)
        if not entries:
            return EnqueueResult.error(OperationStatus.FAILED, UserMessages.COLLECTION_EMPTY)

        if shuffle:
            random.shuffle(entries)

        room = self._queue_settings.max_queue_size - len(subscription.queue)
        if room <= 0:
            return EnqueueResult.error(
                OperationStatus.FAILED,
                UserMessages.QUEUE_FULL.format(limit=self._queue_settings.max_queue_size),
            )

        first_position: int | None = None
        for entry in entries[:room]:
            item = self._build_item(subscription, entry.url, entry.title, entry.thumbnail, notifier)
            position = int(subscription.enqueue(item))
            if first_position is None:
                first_position = position

        count = min(len(entries), room)
        logger.info(LogTemplates.QUEUE_COLLECTION_ADDED, count, key)
        return EnqueueResult.queued_many(first_position or 0, count)

    async def skip(self, key: int, count: int = 1) -> SkipResult:
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return SkipResult.not_active()
        return SkipResult.success(subscription.skip(count))

    async def stop(self, key: int) -> StopResult:
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return StopResult.not_active()
        return StopResult.success(subscription.stop())

    async def pause(self, key: int) -> PlaybackResult:
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return PlaybackResult.not_active()
        if not subscription.pause():
            return PlaybackResult.error(OperationStatus.NOTHING_PLAYING, UserMessages.NOTHING_TO_PAUSE)
        return PlaybackResult.success(UserMessages.PAUSED)

    async def resume(self, key: int) -> PlaybackResult:
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return PlaybackResult.not_active()
        if not subscription.resume():
            return PlaybackResult.error(OperationStatus.NOTHING_PLAYING, UserMessages.NOTHING_TO_RESUME)
        return PlaybackResult.success(UserMessages.RESUMED)

    async def queue_snapshot(self, key: int, limit: int | None = None) -> QueueSnapshot:
        subscription = self._subscriptions.get(key)
        if subscription is None:
            return QueueSnapshot()

        if limit is None:
            limit = self._queue_settings.queue_preview_limit
        now_playing = subscription.now_playing
        return QueueSnapshot(
            active=True,
            now_playing=now_playing.display_title if now_playing is not None else None,
            pending=[item.display_title for item in subscription.queue.snapshot(limit)],
            total_pending=len(subscription.queue),
        )

    def _build_item(
        self,
        subscription: MusicSubscription,
        query: str,
        title: str | None,
        image: str | None,
        notifier: Notifier | None,
    ) -> MediaItem:
        target = notifier or subscription.notifier
        callbacks = None
        if target is not None:
            callbacks = ItemNotices(
                target, expiry_seconds=self._queue_settings.notice_expiry_seconds
            ).callbacks()
        return MediaItem(query, title=title, image=image, callbacks=callbacks)
