"""Short-lived cache of rewritten manifests keyed by channel identifier."""

from __future__ import annotations

from typing import Optional

from ..utils.ttl_cache import Clock, TimedCache
from .manifest_resolver import ManifestResolver


class ManifestCache:
    """Caches rewritten manifests for a few seconds.

    Holds at most ``max_entries`` identifiers and evicts the oldest inserted
    one first. Fallback manifests are cached like any other result.
    """

    def __init__(
        self,
        resolver: ManifestResolver,
        ttl: float,
        max_entries: int,
        clock: Optional[Clock] = None,
    ) -> None:
        self._resolver = resolver
        kwargs = {"clock": clock} if clock is not None else {}
        self._cache: TimedCache[str] = TimedCache(ttl=ttl, max_entries=max_entries, name="manifest cache", **kwargs)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._cache

    async def get(self, identifier: str, origin_url: str) -> str:
        return await self._cache.get_or_produce(identifier, lambda: self._resolver.resolve(origin_url))
