"""Time-bounded in-memory cache shared by the catalog and manifest layers."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    stored_at: float


class TimedCache(Generic[T]):
    """Keyed cache with a freshness window and insertion-order eviction.

    Concurrent misses for the same key share a single producer call. Entries
    are replaced whole, so readers only ever see complete values.
    """

    def __init__(
        self,
        ttl: float,
        max_entries: Optional[int] = None,
        clock: Clock = time.monotonic,
        name: str = "cache",
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self.name = name
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[T]] = {}
        self._pending: Dict[Hashable, "asyncio.Future[T]"] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def keys(self) -> list:
        return list(self._entries)

    def is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.stored_at < self.ttl

    def get_fresh(self, key: Hashable) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is not None and self.is_fresh(entry):
            return entry.value
        return None

    def get_entry(self, key: Hashable) -> Optional[CacheEntry[T]]:
        """Returns the stored entry regardless of age."""

        return self._entries.get(key)

    def put(self, key: Hashable, value: T) -> CacheEntry[T]:
        entry = CacheEntry(value=value, stored_at=self._clock())
        # re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        if self.max_entries is not None:
            while len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logging.debug("%s evicted %s", self.name, oldest)
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_produce(self, key: Hashable, producer: Callable[[], Awaitable[T]]) -> T:
        """Returns a fresh value, running ``producer`` at most once per miss.

        Exceptions from ``producer`` reach every waiting caller and leave the
        previous entry untouched.
        """

        value = self.get_fresh(key)
        if value is not None:
            logging.debug("%s hit for %s", self.name, key)
            return value

        pending = self._pending.get(key)
        if pending is None:
            logging.debug("%s miss for %s", self.name, key)
            pending = asyncio.ensure_future(self._produce(key, producer))
            self._pending[key] = pending
        else:
            logging.debug("%s joining in-flight refresh for %s", self.name, key)
        return await asyncio.shield(pending)

    async def _produce(self, key: Hashable, producer: Callable[[], Awaitable[T]]) -> T:
        try:
            value = await producer()
            self.put(key, value)
            return value
        finally:
            self._pending.pop(key, None)
