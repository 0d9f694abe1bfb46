import asyncio

from conftest import FakeHttpClient
from freelivtv.hls import EMPTY_MANIFEST, ManifestResolver
from freelivtv.models import FetchedDocument
from freelivtv.utils.http_client import FetchError

ORIGIN = "https://cdn.example.com/live/ch1/master.m3u8"

MASTER = """#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=3000000
high/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=800000
low/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=1600000
mid/index.m3u8
"""

MEDIA = """#EXTM3U
#EXT-X-TARGETDURATION:10
#EXTINF:10.0,
seg1.ts
#EXTINF:4.0,
seg2.ts
"""


def resolve(client: FakeHttpClient, url: str = ORIGIN) -> str:
    return asyncio.run(ManifestResolver(client).resolve(url))


class TestManifestResolver:
    def test_master_playlist_follows_middle_variant(self):
        variant_url = "https://cdn.example.com/live/ch1/mid/index.m3u8"
        client = FakeHttpClient({ORIGIN: MASTER, variant_url: MEDIA})
        result = resolve(client)
        assert client.calls == [ORIGIN, variant_url]
        assert result.splitlines() == [
            "#EXTM3U",
            "#EXT-X-TARGETDURATION:6",
            "#EXTINF:6.000,",
            "https://cdn.example.com/live/ch1/mid/seg1.ts",
            "#EXTINF:4.000,",
            "https://cdn.example.com/live/ch1/mid/seg2.ts",
        ]

    def test_media_playlist_rewritten_directly(self):
        client = FakeHttpClient({ORIGIN: MEDIA})
        result = resolve(client)
        assert client.calls == [ORIGIN]
        assert "https://cdn.example.com/live/ch1/seg1.ts" in result
        assert "#EXT-X-TARGETDURATION:6" in result

    def test_segments_resolve_against_redirected_url(self):
        redirected = FetchedDocument(url="https://edge.example.net/abc/playlist.m3u8", body=MEDIA.encode())
        client = FakeHttpClient({ORIGIN: redirected})
        assert "https://edge.example.net/abc/seg1.ts" in resolve(client)

    def test_fetch_failure_yields_empty_manifest(self):
        client = FakeHttpClient({ORIGIN: FetchError("timeout", url=ORIGIN)})
        assert resolve(client) == EMPTY_MANIFEST

    def test_variant_failure_yields_empty_manifest(self):
        client = FakeHttpClient({ORIGIN: MASTER})
        assert resolve(client) == EMPTY_MANIFEST

    def test_undecodable_body_yields_empty_manifest(self):
        client = FakeHttpClient({ORIGIN: b"\xff\xd8\xff\xe0binary"})
        assert resolve(client) == EMPTY_MANIFEST

    def test_non_playlist_passes_through(self):
        client = FakeHttpClient({ORIGIN: "#EXTM3U\n#EXT-X-ENDLIST\n"})
        assert resolve(client) == "#EXTM3U\n#EXT-X-ENDLIST\n"

    def test_master_without_variant_uris_passes_through(self):
        body = "#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=1\n"
        client = FakeHttpClient({ORIGIN: body})
        assert resolve(client) == body

    def test_malformed_segment_uri_yields_empty_manifest(self):
        client = FakeHttpClient({ORIGIN: "#EXTM3U\n#EXTINF:4.0,\nhttp://[broken/seg.ts\n"})
        assert resolve(client) == EMPTY_MANIFEST

    def test_malformed_variant_uri_yields_empty_manifest(self):
        client = FakeHttpClient({ORIGIN: "#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=1\nhttp://[broken/index.m3u8\n"})
        assert resolve(client) == EMPTY_MANIFEST
        assert client.calls == [ORIGIN]
