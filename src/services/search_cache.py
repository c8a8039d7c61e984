from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from src.app.domain.errors import InvalidQueryError

log = logging.getLogger("search_cache")

DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_SWEEP_SECONDS = 600.0

T = TypeVar("T")


def normalize_query(query: Optional[str]) -> str:
    key = (query or "").strip().casefold()
    if not key:
        raise InvalidQueryError()
    return key


@dataclass(slots=True)
class _Entry(Generic[T]):
    value: T
    expires_at: float


class SearchCache(Generic[T]):
    """
    Process-local key -> value cache with per-key expiry.
    A background task evicts expired keys every `sweep_interval` seconds.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        sweep_interval: float = DEFAULT_SWEEP_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: dict[str, _Entry[T]] = {}
        self._sweeper: Optional[asyncio.Task[None]] = None

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + self.ttl)

    def evict_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def flush_all(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    async def start(self) -> None:
        if self._sweeper and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._run(), name="search-cache-sweeper")

    async def stop(self) -> None:
        if not self._sweeper:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        finally:
            self._sweeper = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            evicted = self.evict_expired()
            if evicted:
                log.info("search_cache.sweep evicted=%s remaining=%s", evicted, len(self._entries))
