"""Namespaced in-memory TTL cache.

Entries are keyed by ``(namespace, id)``. Reads enforce expiry themselves,
so ``sweep_expired()`` only reclaims memory; it is never needed for
correctness. Writes are best-effort: a failed write is retried once after a
sweep and then dropped.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TTLS: dict[str, float] = {
    "stats": 30,
    "posts": 180,
    "post": 15 * 60,
    "config": 30 * 60,
    "rss": 30 * 60,
    "sitemap": 60 * 60,
}
FALLBACK_TTL = 5 * 60

# Distinguishes "no entry" from a cached None.
_MISSING = object()


class CacheFullError(Exception):
    """The cache has reached max_entries."""


@dataclass
class CacheEntry:
    namespace: str
    id: str
    value: Any
    created_at: float
    expires_at: float


class TTLCache:
    """Process-local cache with per-entry expiry."""

    def __init__(
        self,
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def get(self, namespace: str, id: str = "") -> Any | None:
        """Return the cached value, or None if absent or expired."""
        value = self._lookup(namespace, id)
        return None if value is _MISSING else value

    def has(self, namespace: str, id: str = "") -> bool:
        return self._lookup(namespace, id) is not _MISSING

    def _lookup(self, namespace: str, id: str) -> Any:
        key = (namespace, id)
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return _MISSING
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            self._misses += 1
            return _MISSING
        self._hits += 1
        return entry.value

    def set(self, namespace: str, id: str, value: Any, ttl: float | None = None) -> None:
        if ttl is None:
            ttl = DEFAULT_TTLS.get(namespace, FALLBACK_TTL)
        try:
            self._store(namespace, id, value, ttl)
        except (CacheFullError, MemoryError) as e:
            removed = self.sweep_expired()
            logger.warning(
                "Cache write %s/%s failed (%s), swept %d expired entries and retrying",
                namespace, id, type(e).__name__, removed,
            )
            try:
                self._store(namespace, id, value, ttl)
            except (CacheFullError, MemoryError):
                logger.warning("Dropping cache write for %s/%s", namespace, id)

    def _store(self, namespace: str, id: str, value: Any, ttl: float) -> None:
        key = (namespace, id)
        if (
            self.max_entries is not None
            and key not in self._entries
            and len(self._entries) >= self.max_entries
        ):
            raise CacheFullError(f"{len(self._entries)} entries")
        now = self._clock()
        self._entries[key] = CacheEntry(
            namespace=namespace,
            id=id,
            value=value,
            created_at=now,
            expires_at=now + ttl,
        )

    def delete(self, namespace: str, id: str | None = None) -> None:
        """Delete one entry, or every entry in the namespace when id is None."""
        if id is not None:
            self._entries.pop((namespace, id), None)
            return
        for key in [k for k in self._entries if k[0] == namespace]:
            self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def sweep_expired(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in list(self._entries.items()) if now >= e.expires_at]
        for key in expired:
            self._entries.pop(key, None)
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def stats(self) -> dict:
        namespaces: dict[str, int] = {}
        for namespace, _ in list(self._entries):
            namespaces[namespace] = namespaces.get(namespace, 0) + 1
        return {
            "entries": len(self._entries),
            "namespaces": namespaces,
            "hits": self._hits,
            "misses": self._misses,
        }

    async def get_or_compute(
        self,
        namespace: str,
        id: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: float | None = None,
    ) -> Any:
        """Return the cached value or await factory() and cache its result.

        Concurrent misses on the same key both compute; last write wins.
        """
        value = self._lookup(namespace, id)
        if value is not _MISSING:
            return value
        value = await factory()
        self.set(namespace, id, value, ttl)
        return value


default_cache = TTLCache()
