import asyncio
import io
from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_music_queue.application.interfaces.audio_sink import AudioSink
from discord_music_queue.application.interfaces.notifier import Notifier
from discord_music_queue.application.interfaces.voice_transport import VoiceTransport
from discord_music_queue.config.settings import QueueSettings, VoiceSettings
from discord_music_queue.domain.playback.media_item import MediaItem, MediaResource
from discord_music_queue.domain.playback.value_objects import StreamType
from discord_music_queue.domain.voice.value_objects import (
    DisconnectReason,
    VoiceState,
    VoiceStatus,
)

GUILD_ID = 111111111111111111


async def settle(rounds: int = 20) -> None:
    """Let every ready callback and task on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll *predicate* until it holds, failing the test after *timeout*."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


def make_resource(item: MediaItem, stream_type: StreamType = StreamType.OGG_OPUS) -> MediaResource:
    process = MagicMock()
    process.poll.return_value = None
    return MediaResource(item, io.BytesIO(b"OggS"), stream_type, process)


# ============================================================================
# Fakes for the ports
# ============================================================================


class FakeSink(AudioSink):
    """Records what it was asked to play; ``finish`` simulates end of stream."""

    def __init__(self) -> None:
        self.played: list[MediaResource] = []
        self.afters: list = []
        self.paused = 0
        self.resumed = 0
        self.stopped = 0
        self.fail_next: Exception | None = None

    def play(self, resource, after) -> None:
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error
        self.played.append(resource)
        self.afters.append(after)

    def pause(self) -> None:
        self.paused += 1

    def resume(self) -> None:
        self.resumed += 1

    def stop(self) -> None:
        self.stopped += 1
        # Like discord.py, stopping reports the end of the current stream.
        if self.afters:
            self.afters[-1](None)

    def finish(self, error: Exception | None = None) -> None:
        self.afters[-1](error)


class FakeTransport(VoiceTransport):
    def __init__(self, *, connect_ok: bool = True, rejoin_ok: bool = True) -> None:
        self.connect_ok = connect_ok
        self.rejoin_ok = rejoin_ok
        self.connect_calls = 0
        self.rejoin_calls = 0
        self.disconnect_calls = 0
        self._sink = FakeSink()

    @property
    def sink(self) -> FakeSink:
        return self._sink

    async def connect(self) -> bool:
        self.connect_calls += 1
        if not self.connect_ok:
            return False
        self.report(VoiceState(VoiceStatus.CONNECTING))
        self.report(VoiceState(VoiceStatus.READY))
        return True

    async def rejoin(self) -> bool:
        self.rejoin_calls += 1
        self.report(VoiceState(VoiceStatus.CONNECTING))
        if not self.rejoin_ok:
            # Like the discord.py transport, a failed rejoin leaves the session disconnected.
            self.report(VoiceState.disconnected(DisconnectReason.ADAPTER_UNAVAILABLE))
            return False
        self.report(VoiceState(VoiceStatus.READY))
        return True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1


class ControlledResolver:
    """Resolver whose resolutions complete only when the test says so."""

    def __init__(self) -> None:
        self.pending: dict[str, tuple[MediaItem, asyncio.Future]] = {}
        self.resources: dict[str, MediaResource] = {}
        self.calls: list[str] = []

    async def resolve(self, item: MediaItem) -> MediaResource:
        self.calls.append(item.query)
        future = asyncio.get_running_loop().create_future()
        self.pending[item.query] = (item, future)
        return await future

    def complete(self, query: str, stream_type: StreamType = StreamType.OGG_OPUS) -> MediaResource:
        item, future = self.pending.pop(query)
        resource = make_resource(item, stream_type)
        self.resources[query] = resource
        future.set_result(resource)
        return resource

    def fail(self, query: str, error: Exception) -> None:
        _, future = self.pending.pop(query)
        future.set_exception(error)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fast_voice_settings():
    """Voice policy with timings small enough for unit tests."""
    return VoiceSettings(
        move_grace_seconds=0.05,
        max_rejoin_attempts=2,
        rejoin_backoff_seconds=0.0,
        ready_timeout_seconds=0.05,
        connect_timeout_seconds=0.05,
    )


@pytest.fixture
def queue_settings():
    return QueueSettings(max_queue_size=50, queue_preview_limit=3, notice_expiry_seconds=0.0)


@pytest.fixture
def resolver():
    return ControlledResolver()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def notifier():
    mock = MagicMock(spec=Notifier)
    mock.now_playing = AsyncMock(return_value=MagicMock(name="notice"))
    mock.previously_played = AsyncMock()
    mock.delete = AsyncMock()
    mock.error = AsyncMock()
    mock.announce = AsyncMock()
    return mock


@pytest.fixture
def item_callbacks():
    """Callbacks that record every lifecycle event as (event, query)."""
    from discord_music_queue.domain.playback.media_item import MediaCallbacks

    events: list[tuple[str, str]] = []
    callbacks = MediaCallbacks(
        on_start=lambda item: events.append(("start", item.query)),
        on_finish=lambda item: events.append(("finish", item.query)),
        on_error=lambda item, error: events.append(("error", item.query)),
    )
    return callbacks, events
