"""Channel catalog ingestion and its stale-tolerant cache."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..models import Category, ChannelDescriptor, RawEntry
from ..utils.http_client import FetchError, HttpClient
from ..utils.ttl_cache import Clock, TimedCache
from .classifier import ChannelClassifier
from .m3u_parser import iter_entries

CATALOG_KEY = "catalog"


def build_catalog(
    entries: Iterable[RawEntry],
    classifier: ChannelClassifier,
    max_channels: int,
) -> List[ChannelDescriptor]:
    """Classifies entries in encounter order and returns them sorted by priority.

    The ``max_channels`` cutoff counts distinct origin URLs as they are
    encountered. A repeated URL keeps the position of its first occurrence
    and the descriptor with the better priority.
    """

    by_url: Dict[str, ChannelDescriptor] = {}
    for entry in entries:
        descriptor = classifier.describe(entry)
        if descriptor is None:
            continue
        current = by_url.get(descriptor.origin_url)
        if current is not None:
            if descriptor.priority < current.priority:
                by_url[descriptor.origin_url] = descriptor
            continue
        if len(by_url) >= max_channels:
            break
        by_url[descriptor.origin_url] = descriptor

    return sorted(by_url.values(), key=lambda channel: channel.priority)


def filter_by_category(channels: Sequence[ChannelDescriptor], category: Optional[Category]) -> List[ChannelDescriptor]:
    if category is None:
        return list(channels)
    return [channel for channel in channels if channel.category == category]


class PlaylistSource:
    """Fetches the remote playlist and runs the parse/classify pipeline."""

    def __init__(
        self,
        http_client: HttpClient,
        playlist_url: str,
        max_channels: int,
        classifier: Optional[ChannelClassifier] = None,
    ) -> None:
        self._client = http_client
        self.playlist_url = playlist_url
        self.max_channels = max_channels
        self._classifier = classifier or ChannelClassifier()

    async def load(self) -> List[ChannelDescriptor]:
        logging.info("Fetching playlist from %s", self.playlist_url)
        document = await self._client.fetch_async(self.playlist_url)
        return self.parse(document.text())

    def load_sync(self) -> List[ChannelDescriptor]:
        return self.parse(self._client.fetch_text(self.playlist_url))

    def parse(self, text: str) -> List[ChannelDescriptor]:
        channels = build_catalog(iter_entries(text), self._classifier, self.max_channels)
        logging.info("Loaded %s channels", len(channels))
        return channels


class ChannelCatalogCache:
    """Serves the classified catalog, refreshing it at most once per TTL.

    A failed refresh returns the last good catalog unchanged, or an empty
    one when nothing has been loaded yet.
    Every call returns a new list, so callers never alter the cached snapshot.
    """

    def __init__(self, source: PlaylistSource, ttl: float, clock: Optional[Clock] = None) -> None:
        self._source = source
        kwargs = {"clock": clock} if clock is not None else {}
        self._cache: TimedCache[List[ChannelDescriptor]] = TimedCache(ttl=ttl, name="catalog cache", **kwargs)

    async def get(self) -> List[ChannelDescriptor]:
        try:
            return list(await self._cache.get_or_produce(CATALOG_KEY, self._source.load))
        except FetchError as exc:
            logging.error("Error loading channels: %s", exc)
            previous = self._cache.get_entry(CATALOG_KEY)
            if previous is not None:
                logging.warning("Returning stale catalog of %s channels", len(previous.value))
                return list(previous.value)
            logging.warning("No cached catalog available; returning empty catalog")
            return []

    async def get_category(self, category: Optional[Category]) -> List[ChannelDescriptor]:
        return filter_by_category(await self.get(), category)
