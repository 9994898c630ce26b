"""VoiceTransport implementation wrapping a discord.py voice connection."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import discord

from discord_music_queue.application.interfaces.voice_transport import VoiceTransport
from discord_music_queue.config.settings import VoiceSettings
from discord_music_queue.domain.shared.messages import LogTemplates
from discord_music_queue.domain.voice.value_objects import (
    CLOSE_CODE_MOVED_OR_REMOVED,
    DisconnectReason,
    VoiceState,
    VoiceStatus,
)
from discord_music_queue.infrastructure.discord.adapters.audio_sink import DiscordAudioSink

if TYPE_CHECKING:
    from discord.types.voice import GuildVoiceState as GuildVoiceStatePayload

logger = logging.getLogger(__name__)

VoiceChannel = discord.VoiceChannel | discord.StageChannel


class TrackingVoiceClient(discord.VoiceClient):
    """VoiceClient that reports once when its connection is gone for good.

    discord.py routes the gateway's "left the channel" update to the voice
    client before tearing it down, so a removal by someone else is seen here
    first. A teardown without that update is a lost connection: the voice
    websocket failed and discord.py gave up because reconnect is disabled.
    """

    def __init__(
        self,
        client: discord.Client,
        channel: discord.abc.Connectable,
        *,
        on_lost: Callable[[bool], None],
    ) -> None:
        super().__init__(client, channel)
        self._on_lost = on_lost
        self.removed = False
        self._reported = False

    async def on_voice_state_update(self, data: GuildVoiceStatePayload) -> None:
        if data["channel_id"] is None:
            self.removed = True
        await super().on_voice_state_update(data)

    def cleanup(self) -> None:
        super().cleanup()
        # discord.py may call cleanup twice for one disconnect.
        if not self._reported:
            self._reported = True
            self._on_lost(self.removed)


class DiscordVoiceTransport(VoiceTransport):
    """Connects to one guild voice channel and reports its connectivity.

    discord.py's own reconnect loop is disabled; the session's policy
    decides whether and when to rejoin. Lost connections are reported by
    the ``TrackingVoiceClient`` this transport connects with; channel moves
    arrive through ``handle_voice_state_update``.
    """

    def __init__(
        self,
        guild: discord.Guild,
        channel: VoiceChannel,
        settings: VoiceSettings | None = None,
    ) -> None:
        self._guild = guild
        self._channel = channel
        self._settings = settings or VoiceSettings()
        self._closing = False
        self._replacing = False
        self._sink = DiscordAudioSink(self._get_voice_client)

    @property
    def guild_id(self) -> int:
        return self._guild.id

    @property
    def channel(self) -> VoiceChannel:
        return self._channel

    @property
    def sink(self) -> DiscordAudioSink:
        return self._sink

    def _get_voice_client(self) -> discord.VoiceClient | None:
        vc = self._guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def _drop_client(self, vc: discord.VoiceClient) -> None:
        # Our own disconnect must not be reported as a lost connection.
        self._replacing = True
        try:
            await vc.disconnect(force=True)
        finally:
            self._replacing = False

    async def _open(self) -> bool:
        self.report(VoiceState(VoiceStatus.CONNECTING))
        try:
            await self._channel.connect(
                timeout=self._settings.connect_timeout_seconds,
                reconnect=False,
                self_deaf=True,
                cls=functools.partial(TrackingVoiceClient, on_lost=self._on_client_lost),
            )
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, self._channel.id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, self._channel.id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

        logger.info(LogTemplates.VOICE_CONNECTED, self._channel.name, self._guild.id)
        self.report(VoiceState(VoiceStatus.READY))
        return True

    async def connect(self) -> bool:
        vc = self._get_voice_client()
        if vc is not None and not vc.is_connected():
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, self._guild.id)
            await self._drop_client(vc)
            vc = None

        if vc is not None:
            if vc.channel is not None and vc.channel.id != self._channel.id:
                await vc.move_to(self._channel)
            self.report(VoiceState(VoiceStatus.READY))
            return True

        return await self._open()

    async def rejoin(self) -> bool:
        vc = self._get_voice_client()
        if vc is not None:
            await self._drop_client(vc)

        if not await self._open():
            self.report(VoiceState.disconnected(DisconnectReason.ADAPTER_UNAVAILABLE))
            return False
        return True

    async def disconnect(self) -> None:
        self._closing = True
        vc = self._get_voice_client()
        if vc is None:
            return
        await vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self._guild.id)

    def _on_client_lost(self, removed: bool) -> None:
        if self._closing or self._replacing:
            return

        if removed:
            # Kicked and moved look the same from here; the session waits
            # briefly for a follow-up channel change before giving up.
            logger.info(LogTemplates.VOICE_REMOVED, self._guild.id)
            self.report(
                VoiceState.disconnected(
                    DisconnectReason.WEBSOCKET_CLOSE, CLOSE_CODE_MOVED_OR_REMOVED
                )
            )
        else:
            logger.warning(LogTemplates.VOICE_CONNECTION_LOST, self._guild.id)
            self.report(VoiceState.disconnected(DisconnectReason.ADAPTER_UNAVAILABLE))

    def handle_voice_state_update(
        self, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        """Translate a channel move of the bot user into a transition."""
        if self._closing or self._replacing or before.channel is None:
            return

        # Leaving the channel is reported by the voice client itself.
        if after.channel is None or before.channel.id == after.channel.id:
            return

        if isinstance(after.channel, discord.VoiceChannel | discord.StageChannel):
            self._channel = after.channel
        self.report(VoiceState(VoiceStatus.CONNECTING))
        self.report(VoiceState(VoiceStatus.READY))
