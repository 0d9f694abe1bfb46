import asyncio

import pytest

from conftest import PLAYLIST_URL, FakeHttpClient
from freelivtv.addon.manifest import CATALOG_CATEGORIES, build_addon_manifest
from freelivtv.addon.service import AddonService
from freelivtv.addon.server import build_service
from freelivtv.hls import EMPTY_MANIFEST
from freelivtv.utils.id_codec import DecodeError, decode_id, encode_id

CRICKET_URL = "https://x/live.m3u8"
CRICKET_MEDIA = "#EXTM3U\n#EXT-X-TARGETDURATION:8\n#EXTINF:8.0,\nseg.ts\n"


@pytest.fixture
def client(sample_playlist):
    return FakeHttpClient({PLAYLIST_URL: sample_playlist, CRICKET_URL: CRICKET_MEDIA})


@pytest.fixture
def service(settings, client):
    return build_service(settings, client)


class TestAddonManifest:
    def test_catalogs_cover_every_category(self, settings):
        manifest = build_addon_manifest(settings)
        ids = [catalog["id"] for catalog in manifest["catalogs"]]
        assert ids[0] == "tamil-all"
        assert set(ids) == set(CATALOG_CATEGORIES)
        assert "tamil-cricket" in ids

    def test_id_prefix_and_resources(self, settings):
        manifest = build_addon_manifest(settings)
        assert manifest["idPrefixes"] == ["tamil:"]
        assert manifest["resources"] == ["catalog", "stream"]
        assert manifest["types"] == ["tv"]


class TestCatalog:
    def test_all_channels(self, service):
        payload = asyncio.run(service.catalog("tv", "tamil-all"))
        names = [meta["name"] for meta in payload["metas"]]
        assert names == ["KTV", "Polimer News", "Star Sports", "Sun TV HD"]

    def test_meta_shape(self, service):
        payload = asyncio.run(service.catalog("tv", "tamil-all"))
        sun = payload["metas"][-1]
        assert sun["id"] == "tamil:" + encode_id("https://streams.example/sun/index.m3u8")
        assert sun["type"] == "tv"
        assert sun["poster"] == "https://logo.example/sun.png"
        assert sun["genres"] == ["Entertainment"]
        assert sun["description"] == "Entertainment • HD"

    def test_meta_without_logo_omits_poster(self, service):
        payload = asyncio.run(service.catalog("tv", "tamil-all"))
        ktv = payload["metas"][0]
        assert "poster" not in ktv
        assert "logo" not in ktv

    def test_category_catalog(self, service):
        payload = asyncio.run(service.catalog("tv", "tamil-cricket"))
        (meta,) = payload["metas"]
        assert decode_id(meta["id"][len("tamil:"):]) == CRICKET_URL

    def test_unknown_catalog(self, service, client):
        assert asyncio.run(service.catalog("tv", "tamil-sports")) == {"metas": []}
        assert asyncio.run(service.catalog("movie", "tamil-all")) == {"metas": []}
        assert client.calls == []

    def test_logos_disabled(self, settings, client):
        service = build_service(settings.model_copy(update={"enable_logos": False}), client)
        payload = asyncio.run(service.catalog("tv", "tamil-all"))
        assert all("poster" not in meta for meta in payload["metas"])


class TestStreams:
    def test_direct_and_stabilized_options(self, service):
        channel_id = "tamil:" + encode_id(CRICKET_URL)
        payload = asyncio.run(service.streams("tv", channel_id, "http://localhost:3000"))
        direct, stabilized = payload["streams"]
        assert direct["url"] == CRICKET_URL
        assert stabilized["url"] == f"https://addon.example/hls/{encode_id(CRICKET_URL)}/playlist.m3u8"
        assert stabilized["behaviorHints"] == {"notWebReady": False}

    def test_request_base_used_without_configured_base(self, settings, client):
        service = build_service(settings.model_copy(update={"base_url": None}), client)
        payload = asyncio.run(service.streams("tv", "tamil:" + encode_id(CRICKET_URL), "http://10.0.0.5:3000/"))
        assert payload["streams"][1]["url"].startswith("http://10.0.0.5:3000/hls/")

    def test_manifest_proxy_disabled(self, settings, client):
        service = build_service(settings.model_copy(update={"enable_manifest_proxy": False}), client)
        payload = asyncio.run(service.streams("tv", "tamil:" + encode_id(CRICKET_URL), None))
        assert [stream["url"] for stream in payload["streams"]] == [CRICKET_URL]

    @pytest.mark.parametrize(
        "channel_id",
        [
            "tamil:!!!",
            "tt0111161",
            "tamil:" + encode_id("javascript:alert(1)"),
        ],
    )
    def test_unresolvable_id(self, service, channel_id):
        assert asyncio.run(service.streams("tv", channel_id, None)) == {"streams": []}

    def test_wrong_type(self, service):
        assert asyncio.run(service.streams("movie", "tamil:" + encode_id(CRICKET_URL), None)) == {"streams": []}


class TestManifestPlaylist:
    def test_rewritten_manifest(self, service):
        body = asyncio.run(service.manifest_playlist(encode_id(CRICKET_URL)))
        assert "#EXT-X-TARGETDURATION:6" in body
        assert "https://x/seg.ts" in body

    def test_bad_identifier(self, service, client):
        assert asyncio.run(service.manifest_playlist("%%%")) == EMPTY_MANIFEST
        assert client.calls == []

    def test_decode_origin_rejects_non_urls(self):
        with pytest.raises(DecodeError):
            AddonService.decode_origin(encode_id("not a url"))
