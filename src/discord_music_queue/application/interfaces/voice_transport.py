"""Port interface for the platform's voice connection primitive."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from discord_music_queue.application.interfaces.audio_sink import AudioSink
    from discord_music_queue.domain.voice.session import VoiceSession
    from discord_music_queue.domain.voice.value_objects import VoiceState


class VoiceTransport(ABC):
    """A live connection to a voice channel.

    Implementations report every connectivity change through ``report`` so
    the bound session can react to it.
    """

    _session: VoiceSession | None = None

    def bind(self, session: VoiceSession) -> None:
        self._session = session

    def report(self, state: VoiceState) -> None:
        """Push a connectivity transition into the bound session."""
        if self._session is not None:
            self._session.set_state(state)

    @abstractmethod
    async def connect(self) -> bool:
        """Open the initial connection."""
        ...

    @abstractmethod
    async def rejoin(self) -> bool:
        """Re-establish the connection without tearing the session down."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection for good."""
        ...

    @property
    @abstractmethod
    def sink(self) -> AudioSink:
        """The audio sink bound to this connection."""
        ...
