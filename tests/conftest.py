"""
Shared fixtures: a manual clock and a scripted stand-in for HttpClient.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Dict, List

import pytest

from freelivtv.models import AddonSettings, FetchedDocument
from freelivtv.utils.http_client import FetchError


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    def __init__(self, chunks: List[bytes], content_type: str = "video/mp2t", error: Exception = None):
        self.headers = {"content-type": content_type}
        self.content = self
        self._chunks = chunks
        self._error = error

    async def iter_chunked(self, size: int):
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


class FakeHttpClient:
    """Serves canned bodies per URL and records every fetch.

    A value may be bytes/str, a FetchedDocument (to simulate redirects), an
    exception instance to raise, or a list consumed one item per call.
    """

    def __init__(self, responses: Dict[str, object] = None, delay: float = 0.0):
        self.responses = dict(responses or {})
        self.delay = delay
        self.calls: List[str] = []
        self.streams: Dict[str, object] = {}
        self.closed = False

    def _next(self, url: str):
        if url not in self.responses:
            raise FetchError(f"{url} returned 404", url=url, status=404)
        value = self.responses[url]
        if isinstance(value, list):
            value = value.pop(0) if len(value) > 1 else value[0]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, FetchedDocument):
            return value
        body = value.encode("utf-8") if isinstance(value, str) else value
        return FetchedDocument(url=url, body=body, content_type="application/vnd.apple.mpegurl")

    async def fetch_async(self, url: str) -> FetchedDocument:
        self.calls.append(url)
        await asyncio.sleep(self.delay)
        return self._next(url)

    def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        return self._next(url).text()

    @asynccontextmanager
    async def open_stream(self, url: str):
        self.calls.append(url)
        upstream = self.streams.get(url)
        if upstream is None:
            raise FetchError("Stream returned 502", url=url, status=502)
        yield upstream

    async def aclose(self) -> None:
        self.closed = True

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


PLAYLIST_URL = "https://playlist.example/starshare.m3u"

SAMPLE_PLAYLIST = """#EXTM3U
#EXTINF:-1 tvg-id="sun" tvg-name="TM: Sun TV HD" tvg-logo="https://logo.example/sun.png" group-title="Tamil Mix",TM: Sun TV HD
https://streams.example/sun/index.m3u8
#EXTINF:-1 tvg-name="Polimer News" group-title="FREE LIV TV || TAMIL NEWS",Polimer News
https://streams.example/polimer/index.m3u8
#EXTINF:-1 tvg-name="CRIC || Star Sports" group-title="FREE LIV TV || CRICKET",CRIC || Star Sports
https://x/live.m3u8
#EXTINF:-1 tvg-name="KTV" group-title="FREE LIV TV || TAMIL",KTV
https://streams.example/ktv/index.m3u8
#EXTINF:-1 tvg-name="Star Maa Telugu" group-title="FREE LIV TV || TAMIL",Star Maa Telugu
https://streams.example/maa/index.m3u8
#EXTINF:-1 tvg-name="BBC One" group-title="UK",BBC One
https://streams.example/bbc/index.m3u8
"""


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_playlist() -> str:
    return SAMPLE_PLAYLIST


@pytest.fixture
def settings() -> AddonSettings:
    return AddonSettings(
        playlist_url=PLAYLIST_URL,
        base_url="https://addon.example",
        catalog_ttl=60,
        manifest_ttl=5,
        max_channels=50,
        max_manifest_entries=3,
    )
