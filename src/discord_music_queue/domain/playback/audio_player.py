"""State machine for the single playback slot of a subscription."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from discord_music_queue.domain.playback.media_item import MediaResource
from discord_music_queue.domain.playback.value_objects import PlayerStatus
from discord_music_queue.domain.shared.exceptions import InvalidOperationError, PlaybackError
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_music_queue.application.interfaces.audio_sink import AudioSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerState:
    status: PlayerStatus
    resource: MediaResource | None = None


StateListener = Callable[[PlayerState, PlayerState], None]
ErrorListener = Callable[[PlaybackError, MediaResource], None]


class AudioPlayer:
    """Holds at most one resource and drives it through the platform sink.

    Listeners are notified synchronously on every transition. End-of-stream
    reports from the sink are matched against the active resource so a report
    for a resource that was already stopped is ignored.
    """

    def __init__(self, sink: AudioSink | None = None) -> None:
        self._sink = sink
        self._state = PlayerState(PlayerStatus.IDLE)
        self._state_listeners: list[StateListener] = []
        self._error_listeners: list[ErrorListener] = []

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def status(self) -> PlayerStatus:
        return self._state.status

    @property
    def resource(self) -> MediaResource | None:
        return self._state.resource

    @property
    def is_idle(self) -> bool:
        return self._state.status == PlayerStatus.IDLE

    def attach(self, sink: AudioSink) -> None:
        """Bind the platform sink once the voice transport is available."""
        self._sink = sink

    def on_state_change(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def on_error(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def play(self, resource: MediaResource) -> None:
        """Start *resource*. The player must be idle."""
        if self._sink is None:
            raise InvalidOperationError("play", self.status.value, ErrorMessages.NO_AUDIO_SINK)
        if not self.is_idle:
            raise InvalidOperationError("play", self.status.value)

        self._transition(PlayerState(PlayerStatus.BUFFERING, resource))
        try:
            self._sink.play(resource, lambda error: self.handle_end(resource, error))
        except Exception as e:
            self._fail(resource, e)
            return

        if self._state.resource is resource and self.status == PlayerStatus.BUFFERING:
            self._transition(PlayerState(PlayerStatus.PLAYING, resource))

    def pause(self) -> bool:
        if self.status != PlayerStatus.PLAYING or self._sink is None:
            return False
        self._sink.pause()
        self._transition(PlayerState(PlayerStatus.PAUSED, self.resource))
        return True

    def unpause(self) -> bool:
        if self.status != PlayerStatus.PAUSED or self._sink is None:
            return False
        self._sink.resume()
        self._transition(PlayerState(PlayerStatus.PLAYING, self.resource))
        return True

    def stop(self) -> bool:
        """Drop the active resource. Returns False if nothing was active."""
        resource = self.resource
        if self.is_idle or resource is None:
            return False

        # Go idle before touching the sink so its end report is seen as stale.
        self._transition(PlayerState(PlayerStatus.IDLE))
        if self._sink is not None:
            try:
                self._sink.stop()
            except Exception as e:
                logger.warning(LogTemplates.PLAYER_SINK_STOP_FAILED, e)
        resource.close()
        return True

    def handle_end(self, resource: MediaResource, error: BaseException | None = None) -> None:
        """Sink report that *resource* stopped producing audio.

        Must be called on the event loop thread.
        """
        if self._state.resource is not resource:
            logger.debug(LogTemplates.PLAYER_STALE_END_IGNORED, resource.item.display_title)
            return

        if error is not None:
            self._fail(resource, error)
            return

        self._transition(PlayerState(PlayerStatus.IDLE))
        resource.close()

    def _fail(self, resource: MediaResource, error: BaseException) -> None:
        logger.warning(LogTemplates.PLAYER_ERROR, resource.item.display_title, error)
        playback_error = PlaybackError(
            ErrorMessages.PLAYBACK_FAILED.format(error=error), cause=error
        )
        for listener in list(self._error_listeners):
            try:
                listener(playback_error, resource)
            except Exception:
                logger.exception(LogTemplates.PLAYER_LISTENER_FAILED)

        if self._state.resource is resource:
            self._transition(PlayerState(PlayerStatus.IDLE))
        resource.close()

    def _transition(self, new_state: PlayerState) -> None:
        old_state = self._state
        if not old_state.status.can_transition_to(new_state.status):
            raise InvalidOperationError(
                operation=f"transition to {new_state.status.value}",
                current_state=old_state.status.value,
            )

        self._state = new_state
        logger.debug(
            LogTemplates.PLAYER_TRANSITION, old_state.status.value, new_state.status.value
        )
        for listener in list(self._state_listeners):
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception(LogTemplates.PLAYER_LISTENER_FAILED)
