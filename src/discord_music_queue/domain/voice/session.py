"""Voice session state machine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from discord_music_queue.domain.shared.exceptions import ConnectionTimeoutError
from discord_music_queue.domain.shared.messages import LogTemplates
from discord_music_queue.domain.voice.value_objects import VoiceState, VoiceStatus

if TYPE_CHECKING:
    from discord_music_queue.application.interfaces.voice_transport import VoiceTransport

logger = logging.getLogger(__name__)

VoiceStateListener = Callable[[VoiceState, VoiceState], None]


class VoiceSession:
    """Tracks the connectivity of one voice connection.

    The transport pushes transitions in through ``set_state``; listeners and
    ``wait_for`` callers observe them. DESTROYED is terminal: once entered,
    later transitions are ignored.
    """

    def __init__(self, key: int, transport: VoiceTransport | None = None) -> None:
        self.key = key
        self.rejoin_attempts = 0
        self._state = VoiceState(VoiceStatus.SIGNALLING)
        self._transport: VoiceTransport | None = None
        self._listeners: list[VoiceStateListener] = []
        self._waiters: list[tuple[VoiceStatus, asyncio.Future[None]]] = []
        if transport is not None:
            self.bind(transport)

    @property
    def state(self) -> VoiceState:
        return self._state

    @property
    def status(self) -> VoiceStatus:
        return self._state.status

    @property
    def is_destroyed(self) -> bool:
        return self._state.status == VoiceStatus.DESTROYED

    @property
    def transport(self) -> VoiceTransport | None:
        return self._transport

    def bind(self, transport: VoiceTransport) -> None:
        self._transport = transport
        transport.bind(self)

    def on_state_change(self, listener: VoiceStateListener) -> None:
        self._listeners.append(listener)

    def set_state(self, new_state: VoiceState) -> None:
        old_state = self._state
        if old_state.status == VoiceStatus.DESTROYED:
            logger.debug(LogTemplates.VOICE_STATE_AFTER_DESTROY, self.key, new_state.status.value)
            return

        if new_state.status == VoiceStatus.READY:
            self.rejoin_attempts = 0

        self._state = new_state
        logger.debug(
            LogTemplates.VOICE_TRANSITION, self.key, old_state.status.value, new_state.status.value
        )

        for status, waiter in list(self._waiters):
            if status == new_state.status and not waiter.done():
                waiter.set_result(None)

        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception(LogTemplates.VOICE_LISTENER_FAILED, self.key)

    async def wait_for(self, status: VoiceStatus, timeout: float) -> None:
        """Wait until the session enters *status*.

        Raises:
            ConnectionTimeoutError: If *status* is not reached within *timeout*.
        """
        if self._state.status == status:
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        entry = (status, waiter)
        self._waiters.append(entry)
        try:
            async with asyncio.timeout(timeout):
                await waiter
        except TimeoutError:
            raise ConnectionTimeoutError(status.value, timeout) from None
        finally:
            self._waiters.remove(entry)

    async def connect(self) -> bool:
        """Ask the transport for the initial connection."""
        if self._transport is None or self.is_destroyed:
            return False
        try:
            return await self._transport.connect()
        except Exception:
            logger.exception(LogTemplates.VOICE_CONNECT_FAILED, self.key)
            return False

    async def rejoin(self) -> bool:
        """Count an attempt and ask the transport to re-establish the session."""
        if self._transport is None or self.is_destroyed:
            return False

        self.rejoin_attempts += 1
        logger.info(LogTemplates.VOICE_REJOINING, self.key, self.rejoin_attempts)
        self.set_state(VoiceState(VoiceStatus.SIGNALLING))
        try:
            return await self._transport.rejoin()
        except Exception as e:
            logger.warning(LogTemplates.VOICE_REJOIN_FAILED, self.key, e)
            return False

    async def destroy(self) -> None:
        """Enter DESTROYED and release the transport. Idempotent."""
        if self.is_destroyed:
            return

        self.set_state(VoiceState(VoiceStatus.DESTROYED))
        if self._transport is not None:
            try:
                await self._transport.disconnect()
            except Exception as e:
                logger.debug(LogTemplates.VOICE_CLEANUP_ERROR, e)
