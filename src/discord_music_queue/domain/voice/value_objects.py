"""Value objects describing voice session connectivity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

# Gateway close code sent both when the bot is moved to another channel and
# when it is kicked from the channel.
CLOSE_CODE_MOVED_OR_REMOVED: Final[int] = 4014


class VoiceStatus(Enum):
    """Connectivity states of a voice session."""

    SIGNALLING = "signalling"
    CONNECTING = "connecting"
    READY = "ready"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"

    @property
    def is_pending(self) -> bool:
        """States that must reach READY within the readiness window."""
        return self in (VoiceStatus.SIGNALLING, VoiceStatus.CONNECTING)


class DisconnectReason(Enum):
    """Why a session entered DISCONNECTED."""

    WEBSOCKET_CLOSE = "websocket_close"
    ADAPTER_UNAVAILABLE = "adapter_unavailable"
    ENDPOINT_REMOVED = "endpoint_removed"
    MANUAL = "manual"


@dataclass(frozen=True)
class VoiceState:
    status: VoiceStatus
    reason: DisconnectReason | None = None
    close_code: int | None = None

    @classmethod
    def disconnected(
        cls, reason: DisconnectReason, close_code: int | None = None
    ) -> VoiceState:
        return cls(VoiceStatus.DISCONNECTED, reason=reason, close_code=close_code)

    @property
    def may_be_channel_move(self) -> bool:
        """A transport close that is either a channel move or a kick."""
        return (
            self.status == VoiceStatus.DISCONNECTED
            and self.reason == DisconnectReason.WEBSOCKET_CLOSE
            and self.close_code == CLOSE_CODE_MOVED_OR_REMOVED
        )
