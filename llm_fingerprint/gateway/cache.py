"""Development-time response cache.

In-memory TTL cache keyed by md5(model:prompt). Advisory only: a miss, an
expired entry or a write lost to a race never changes what the dispatcher
returns, only whether a backend call is made.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from llm_fingerprint.gateway.types import RawResponse

logger = logging.getLogger(__name__)


@dataclass
class _CacheEntry:
    model: str
    prompt: str
    response: RawResponse
    stored_at: float  # clock() value at write time


class ResponseCache:
    """TTL cache for successful model responses, safe for concurrent use within a batch."""

    def __init__(self, ttl_seconds: float = 24 * 60 * 60, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def make_key(model: str, prompt: str) -> str:
        return hashlib.md5(f"{model}:{prompt}".encode("utf-8")).hexdigest()

    def _is_fresh(self, entry: _CacheEntry) -> bool:
        return self._clock() - entry.stored_at < self.ttl_seconds

    async def get(self, model: str, prompt: str) -> RawResponse | None:
        """Return the cached response, or None on a miss or expired entry."""
        key = self.make_key(model, prompt)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry):
                del self._entries[key]
                return None

        logger.debug("Cache hit for %s (key=%s...)", model, key[:8])
        return entry.response

    async def set(self, model: str, prompt: str, response: RawResponse) -> None:
        """Store *response*, dropping any entries that have expired meanwhile."""
        key = self.make_key(model, prompt)
        async with self._lock:
            removed = self._drop_expired()
            self._entries[key] = _CacheEntry(
                model=model,
                prompt=prompt,
                response=response,
                stored_at=self._clock(),
            )
        if removed:
            logger.debug("Purged %d expired cache entries", removed)

    def _drop_expired(self) -> int:
        # Caller holds self._lock
        expired = [k for k, e in self._entries.items() if not self._is_fresh(e)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def purge_expired(self) -> int:
        """Drop expired entries. Returns the number removed."""
        async with self._lock:
            removed = self._drop_expired()
        if removed:
            logger.debug("Purged %d expired cache entries", removed)
        return removed

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)
