"""Catalog, stream and manifest lookups behind the HTTP routes."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..hls import EMPTY_MANIFEST, ManifestCache
from ..models import AddonSettings, ChannelDescriptor, MetaPreview, StreamOption
from ..models.channel_models import URL_SCHEMES
from ..playlist import ChannelCatalogCache
from ..utils.id_codec import DecodeError, decode_id, encode_id, strip_prefix
from .manifest import CATALOG_CATEGORIES, CONTENT_TYPE


class AddonService:
    """Maps cached channels and manifests onto addon response payloads."""

    def __init__(self, settings: AddonSettings, catalog: ChannelCatalogCache, manifests: ManifestCache) -> None:
        self.settings = settings
        self._catalog = catalog
        self._manifests = manifests

    def channel_id(self, channel: ChannelDescriptor) -> str:
        return self.settings.id_prefix + encode_id(channel.origin_url)

    def to_meta(self, channel: ChannelDescriptor) -> MetaPreview:
        logo = channel.logo_url if self.settings.enable_logos else None
        return MetaPreview(
            id=self.channel_id(channel),
            name=channel.clean_name,
            poster=logo,
            logo=logo,
            genres=[channel.category.value],
            description=f"{channel.category.value} • {channel.quality.value}",
        )

    async def catalog(self, content_type: str, catalog_id: str) -> Dict[str, List[Dict[str, Any]]]:
        logging.info("[CATALOG] Request: type=%s, id=%s", content_type, catalog_id)
        if content_type != CONTENT_TYPE or catalog_id not in CATALOG_CATEGORIES:
            return {"metas": []}

        channels = await self._catalog.get_category(CATALOG_CATEGORIES[catalog_id])
        metas = [self.to_meta(channel).model_dump(exclude_none=True) for channel in channels]
        logging.info("[CATALOG] Returning %s items for %s", len(metas), catalog_id)
        return {"metas": metas}

    def resolve_origin(self, channel_id: str) -> str:
        """Turns an external id back into the origin URL; raises DecodeError."""

        return self.decode_origin(strip_prefix(channel_id, self.settings.id_prefix))

    @staticmethod
    def decode_origin(encoded_id: str) -> str:
        origin_url = decode_id(encoded_id)
        if not origin_url.lower().startswith(URL_SCHEMES):
            raise DecodeError(f"identifier does not hold a stream URL: {origin_url[:60]!r}")
        return origin_url

    async def streams(self, content_type: str, channel_id: str, base_url: Optional[str]) -> Dict[str, List[Dict[str, Any]]]:
        logging.info("[STREAM] Request: type=%s, id=%s", content_type, channel_id)
        if content_type != CONTENT_TYPE:
            return {"streams": []}
        try:
            origin_url = self.resolve_origin(channel_id)
        except DecodeError as exc:
            logging.warning("[STREAM] Unresolvable id %s: %s", channel_id, exc)
            return {"streams": []}

        options = [StreamOption(url=origin_url, title="Play")]
        public_base = self.settings.base_url or base_url
        if self.settings.enable_manifest_proxy and public_base:
            encoded = strip_prefix(channel_id, self.settings.id_prefix)
            options.append(
                StreamOption(
                    url=f"{public_base.rstrip('/')}/hls/{encoded}/playlist.m3u8",
                    title="Play (stabilized)",
                )
            )
        return {"streams": [option.model_dump() for option in options]}

    async def manifest_playlist(self, encoded_id: str) -> str:
        try:
            origin_url = self.decode_origin(encoded_id)
        except DecodeError as exc:
            logging.warning("[HLS] Unresolvable id %s: %s", encoded_id, exc)
            return EMPTY_MANIFEST
        return await self._manifests.get(encoded_id, origin_url)
