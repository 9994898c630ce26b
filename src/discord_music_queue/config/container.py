"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the media adapters and the subscription registry.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.media_search import MediaSearch
    from ..application.interfaces.stream_opener import StreamOpener
    from ..application.services.media_resolver import MediaResolver
    from ..application.services.subscription_registry import SubscriptionRegistry
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _media_search: MediaSearch | None = None
    _stream_opener: StreamOpener | None = None

    # Application services
    _media_resolver: MediaResolver | None = None
    _registry: SubscriptionRegistry | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure ===

    @property
    def media_search(self) -> MediaSearch:
        if self._media_search is None:
            from ..infrastructure.audio.ytdlp_search import YtDlpSearch

            self._media_search = YtDlpSearch()
        return self._media_search

    @property
    def stream_opener(self) -> StreamOpener:
        if self._stream_opener is None:
            from ..infrastructure.audio.ytdlp_stream import YtDlpStreamOpener

            self._stream_opener = YtDlpStreamOpener(self.settings.audio)
        return self._stream_opener

    # === Application services ===

    @property
    def media_resolver(self) -> MediaResolver:
        if self._media_resolver is None:
            from ..application.services.media_resolver import MediaResolver

            self._media_resolver = MediaResolver(
                search=self.media_search,
                stream_opener=self.stream_opener,
            )
        return self._media_resolver

    @property
    def registry(self) -> SubscriptionRegistry:
        """Get the per-guild subscription registry."""
        if self._registry is None:
            from ..application.services.subscription_registry import SubscriptionRegistry

            self._registry = SubscriptionRegistry(
                resolver=self.media_resolver,
                search=self.media_search,
                queue_settings=self.settings.queue,
                voice_settings=self.settings.voice,
            )
        return self._registry

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Build the registry eagerly so the first command does not pay for it."""
        _ = self.registry
        logger.info(LogTemplates.CONTAINER_INITIALIZED)

    async def shutdown(self) -> int:
        """Broadcast the restart notice and tear down every subscription.

        Returns how many subscriptions were torn down.
        """
        if self._registry is None:
            return 0
        count = await self._registry.shutdown(self.settings.restart.shutdown_notice)
        logger.info(LogTemplates.CONTAINER_SHUTDOWN)
        return count


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
