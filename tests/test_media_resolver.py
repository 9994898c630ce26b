"""
Media Resolver Tests

Tests for turning queued items into streamable resources:
- URL vs search query routing
- Unsupported sources
- Metadata completion and sanitization
- Cleanup when opening or probing fails
"""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_music_queue.application.interfaces.media_search import MediaSearch, SearchResult
from discord_music_queue.application.interfaces.stream_opener import OpenedStream, StreamOpener
from discord_music_queue.application.services.media_resolver import (
    MediaResolver,
    is_supported_source,
    is_url,
    sanitize_text,
)
from discord_music_queue.domain.playback.media_item import MediaItem
from discord_music_queue.domain.playback.value_objects import StreamType
from discord_music_queue.domain.shared.exceptions import (
    ResolutionFailureError,
    UnsupportedSourceError,
)

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
THUMB_URL = "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def search():
    mock = MagicMock(spec=MediaSearch)
    mock.search_one = AsyncMock(
        return_value=SearchResult(url=VIDEO_URL, title="Never Gonna Give You Up", thumbnail=THUMB_URL)
    )
    mock.lookup_metadata = AsyncMock(
        return_value=SearchResult(url=VIDEO_URL, title="Looked Up", thumbnail=THUMB_URL)
    )
    return mock


@pytest.fixture
def process():
    proc = MagicMock()
    proc.poll.return_value = None
    return proc


@pytest.fixture
def opener(process):
    mock = MagicMock(spec=StreamOpener)
    mock.open = AsyncMock(return_value=OpenedStream(stream=io.BytesIO(b"OggS"), process=process))
    mock.probe = AsyncMock(return_value=StreamType.OGG_OPUS)
    return mock


@pytest.fixture
def resolver(search, opener):
    return MediaResolver(search=search, stream_opener=opener)


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Tests for the module-level helpers."""

    def test_sanitize_text(self):
        """Should strip tags, decode entities and collapse whitespace."""
        assert sanitize_text("<b>Rock</b> &amp;  Roll\n") == "Rock & Roll"

    def test_is_url(self):
        """Should recognise http and https URLs only."""
        assert is_url(VIDEO_URL)
        assert is_url("HTTP://example.com")
        assert not is_url("rick astley")

    @pytest.mark.parametrize(
        "url",
        [
            VIDEO_URL,
            "https://youtu.be/dQw4w9WgXcQ",
            "https://music.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/abc123",
        ],
    )
    def test_supported_sources(self, url):
        """Should accept YouTube video URLs."""
        assert is_supported_source(url)

    @pytest.mark.parametrize(
        "url",
        ["https://soundcloud.com/artist/track", "https://example.com/watch?v=1"],
    )
    def test_unsupported_sources(self, url):
        """Should reject other hosts."""
        assert not is_supported_source(url)


# =============================================================================
# Resolution
# =============================================================================


class TestResolve:
    """Tests for MediaResolver.resolve."""

    @pytest.mark.asyncio
    async def test_search_query(self, resolver, search, opener):
        """Should search, fill metadata from the hit and open the stream."""
        item = MediaItem("rick astley")

        resource = await resolver.resolve(item)

        search.search_one.assert_awaited_once_with("rick astley")
        search.lookup_metadata.assert_not_awaited()
        opener.open.assert_awaited_once_with(VIDEO_URL)
        assert resource.item is item
        assert resource.stream_type == StreamType.OGG_OPUS
        assert item.title == "Never Gonna Give You Up"
        assert item.image == THUMB_URL

    @pytest.mark.asyncio
    async def test_direct_url_looks_up_metadata(self, resolver, search, opener):
        """Should skip search for a URL and look up the missing metadata."""
        item = MediaItem(VIDEO_URL)

        await resolver.resolve(item)

        search.search_one.assert_not_awaited()
        search.lookup_metadata.assert_awaited_once_with(VIDEO_URL)
        assert item.title == "Looked Up"

    @pytest.mark.asyncio
    async def test_known_metadata_skips_lookup(self, resolver, search):
        """Should not look anything up when title and image are known."""
        item = MediaItem(VIDEO_URL, title="Known", image=THUMB_URL)

        await resolver.resolve(item)

        search.lookup_metadata.assert_not_awaited()
        assert item.title == "Known"

    @pytest.mark.asyncio
    async def test_title_is_sanitized(self, resolver):
        """Should sanitize the title before display."""
        item = MediaItem(VIDEO_URL, title="<i>Song</i> &quot;Live&quot;", image=THUMB_URL)

        await resolver.resolve(item)

        assert item.title == 'Song "Live"'

    @pytest.mark.asyncio
    async def test_unsupported_url(self, resolver, opener):
        """Should reject a URL from an unsupported source."""
        with pytest.raises(UnsupportedSourceError):
            await resolver.resolve(MediaItem("https://example.com/song.mp3"))
        opener.open.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_miss(self, resolver, search):
        """Should fail when the search finds nothing."""
        search.search_one.return_value = None
        with pytest.raises(ResolutionFailureError):
            await resolver.resolve(MediaItem("zzzzzz"))

    @pytest.mark.asyncio
    async def test_lookup_miss(self, resolver, search):
        """Should fail when metadata cannot be looked up."""
        search.lookup_metadata.return_value = None
        with pytest.raises(ResolutionFailureError):
            await resolver.resolve(MediaItem(VIDEO_URL))

    @pytest.mark.asyncio
    async def test_open_failure(self, resolver, opener):
        """Should wrap spawn failures as resolution failures."""
        opener.open.side_effect = OSError("yt-dlp not installed")
        with pytest.raises(ResolutionFailureError) as exc_info:
            await resolver.resolve(MediaItem("rick astley"))
        assert "yt-dlp not installed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_probe_failure_discards_stream(self, resolver, opener, process):
        """Should kill the producer and close the pipe when probing fails."""
        opened = OpenedStream(stream=io.BytesIO(b""), process=process)
        opener.open.return_value = opened
        opener.probe.side_effect = EOFError("stream ended")

        with pytest.raises(ResolutionFailureError):
            await resolver.resolve(MediaItem("rick astley"))

        process.kill.assert_called_once()
        assert opened.stream.closed
