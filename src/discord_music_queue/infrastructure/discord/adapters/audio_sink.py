"""AudioSink implementation backed by a discord.py VoiceClient."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import discord

from discord_music_queue.application.interfaces.audio_sink import AudioSink, EndCallback
from discord_music_queue.domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from discord_music_queue.domain.playback.media_item import MediaResource

logger = logging.getLogger(__name__)

FFMPEG_OPTIONS: str = "-vn"


class DiscordAudioSink(AudioSink):
    """Feeds a resource's byte pipe through FFmpeg into the voice client.

    Probed Opus containers are remuxed with ``-c:a copy``; anything else is
    transcoded. discord.py reports the end of a stream from its player
    thread, so the end callback is marshalled back onto the event loop.
    """

    def __init__(
        self,
        voice_client: Callable[[], discord.VoiceClient | None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._voice_client = voice_client
        self._loop = loop

    def _require_client(self) -> discord.VoiceClient:
        vc = self._voice_client()
        if vc is None or not vc.is_connected():
            raise discord.ClientException(ErrorMessages.NO_AUDIO_SINK)
        return vc

    def create_source(self, resource: MediaResource) -> discord.FFmpegOpusAudio:
        codec = "copy" if resource.stream_type.is_opus else None
        return discord.FFmpegOpusAudio(
            resource.stream,
            pipe=True,
            codec=codec,
            options=FFMPEG_OPTIONS,
        )

    def play(self, resource: MediaResource, after: EndCallback) -> None:
        vc = self._require_client()
        loop = self._loop or asyncio.get_running_loop()
        source = self.create_source(resource)

        def _after(error: Exception | None) -> None:
            # Runs on the discord.py player thread.
            loop.call_soon_threadsafe(after, error)

        vc.play(source, after=_after)

    def pause(self) -> None:
        vc = self._voice_client()
        if vc is not None and vc.is_playing():
            vc.pause()

    def resume(self) -> None:
        vc = self._voice_client()
        if vc is not None and vc.is_paused():
            vc.resume()

    def stop(self) -> None:
        vc = self._voice_client()
        if vc is not None:
            vc.stop()
