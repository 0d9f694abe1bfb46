"""Fetches origin HLS playlists and turns them into player-friendly media playlists."""

from __future__ import annotations

import logging

from ..models import FetchedDocument
from ..utils.http_client import FetchError, HttpClient
from .manifest_rewriter import (
    EMPTY_MANIFEST,
    MAX_SEGMENT_SECONDS,
    ParseError,
    base_url,
    decode_body,
    is_master_playlist,
    is_media_playlist,
    parse_variants,
    resolve_uri,
    rewrite_media_playlist,
    select_variant,
)


class ManifestResolver:
    """Resolves an origin URL into rewritten manifest text.

    Master playlists are narrowed to a single mid-bitrate variant, media
    playlists get capped durations and absolute segment URIs. Upstream
    failures yield :data:`EMPTY_MANIFEST` instead of raising.
    """

    def __init__(self, http_client: HttpClient, ceiling: int = MAX_SEGMENT_SECONDS) -> None:
        self._client = http_client
        self.ceiling = ceiling

    async def resolve(self, origin_url: str) -> str:
        try:
            return await self._resolve(origin_url)
        except (FetchError, ParseError) as exc:
            logging.warning("Serving empty manifest for %s: %s", origin_url, exc)
            return EMPTY_MANIFEST

    async def _resolve(self, origin_url: str) -> str:
        document = await self._client.fetch_async(origin_url)
        text = decode_body(document.body)

        if is_master_playlist(text):
            variant = select_variant(parse_variants(text))
            if variant is None:
                logging.debug("Master playlist at %s lists no variants", origin_url)
                return text
            variant_url = resolve_uri(variant.uri, base_url(document.url))
            logging.debug("Selected %sbps variant %s", variant.bandwidth, variant_url)
            document = await self._client.fetch_async(variant_url)
            text = decode_body(document.body)

        return self._rewrite(document, text)

    def _rewrite(self, document: FetchedDocument, text: str) -> str:
        if not is_media_playlist(text):
            return text
        return rewrite_media_playlist(text, document.url, self.ceiling)
