"""Result models returned by the subscription registry entry points."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from discord_music_queue.domain.shared.messages import UserMessages
from discord_music_queue.domain.shared.types import NonNegativeInt, QueuePositionInt


class OperationStatus(Enum):
    """Status codes shared by every entry point result."""

    SUCCESS = "success"
    NOT_ACTIVE = "not_active"
    NOTHING_PLAYING = "nothing_playing"
    FAILED = "failed"


class OperationResult(BaseModel):
    status: OperationStatus
    message: str

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @classmethod
    def not_active(cls, **fields: object):
        """Neutral result for a key with no active subscription."""
        return cls(status=OperationStatus.NOT_ACTIVE, message=UserMessages.NOT_ACTIVE, **fields)

    @classmethod
    def error(cls, status: OperationStatus, message: str, **fields: object):
        return cls(status=status, message=message, **fields)


class EnqueueResult(OperationResult):
    position: QueuePositionInt | None = None
    count: NonNegativeInt = 0

    @classmethod
    def queued(cls, position: int, title: str) -> EnqueueResult:
        if position == 0:
            message = UserMessages.ENQUEUED_NOW.format(title=title)
        else:
            message = UserMessages.ENQUEUED_AT.format(title=title, position=position)
        return cls(status=OperationStatus.SUCCESS, message=message, position=position, count=1)

    @classmethod
    def queued_many(cls, first_position: int, count: int) -> EnqueueResult:
        return cls(
            status=OperationStatus.SUCCESS,
            message=UserMessages.ENQUEUED_MANY.format(count=count),
            position=first_position,
            count=count,
        )


class SkipResult(OperationResult):
    skipped: NonNegativeInt = 0

    @classmethod
    def success(cls, skipped: int) -> SkipResult:
        if skipped == 0:
            return cls(status=OperationStatus.NOTHING_PLAYING, message=UserMessages.NOTHING_PLAYING)
        return cls(
            status=OperationStatus.SUCCESS,
            message=UserMessages.SKIPPED.format(count=skipped),
            skipped=skipped,
        )


class StopResult(OperationResult):
    cleared: NonNegativeInt = 0

    @classmethod
    def success(cls, cleared: int) -> StopResult:
        return cls(
            status=OperationStatus.SUCCESS,
            message=UserMessages.STOPPED.format(count=cleared),
            cleared=cleared,
        )


class PlaybackResult(OperationResult):

    @classmethod
    def success(cls, message: str) -> PlaybackResult:
        return cls(status=OperationStatus.SUCCESS, message=message)


class LeaveResult(OperationResult):

    @classmethod
    def success(cls) -> LeaveResult:
        return cls(status=OperationStatus.SUCCESS, message=UserMessages.LEFT)


class QueueSnapshot(BaseModel):
    """Now-playing title plus the head of the pending queue."""

    active: bool = False
    now_playing: str | None = None
    pending: list[str] = Field(default_factory=list)
    total_pending: NonNegativeInt = 0

    @property
    def is_empty(self) -> bool:
        return self.now_playing is None and self.total_pending == 0

    @property
    def hidden_count(self) -> int:
        """Pending items not included in ``pending``."""
        return self.total_pending - len(self.pending)
