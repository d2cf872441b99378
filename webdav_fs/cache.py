"""Read-through cache for stat results, listings and file contents."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from logging import getLogger
from typing import Any

from .paths import normalize, parent_of

logger = getLogger(__name__)


class CacheKind(str, Enum):
    STAT = "stat"
    READ = "read"
    READDIR = "readdir"


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class ExpiringCache:
    """In-memory cache with a fixed time-to-live per entry.

    Keys are ``(kind, normalized path)``. The cache belongs to a single
    client and is not synchronized.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl <= 0:
            raise ValueError("cache ttl must be positive")
        self.ttl = ttl
        self._clock = clock
        self._cache: dict[tuple[CacheKind, str], CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, kind: CacheKind, path: str) -> Any | None:
        key = (kind, normalize(path))
        cached = self._cache.get(key)
        if cached is None:
            return None
        if self._clock() < cached.expires_at:
            return cached.value

        # Cache entry expired
        self._cache.pop(key, None)
        return None

    def set(self, kind: CacheKind, path: str, value: Any) -> None:
        self._cache[(kind, normalize(path))] = CacheEntry(value, self._clock() + self.ttl)

    def delete(self, kind: CacheKind, path: str) -> None:
        self._cache.pop((kind, normalize(path)), None)

    def invalidate(self, path: str) -> None:
        """Drop the entries of a path and the listing of its parent."""
        path = normalize(path)
        logger.debug(f"cache: invalidating {path}")
        self.delete(CacheKind.READ, path)
        self.delete(CacheKind.STAT, path)
        self.delete(CacheKind.READDIR, parent_of(path))

    def invalidate_tree(self, path: str) -> None:
        """Drop every entry at or below a path, plus the parent listing."""
        path = normalize(path)
        prefix = path.rstrip("/") + "/"
        for key in [k for k in self._cache if k[1] == path or k[1].startswith(prefix)]:
            del self._cache[key]
        self.delete(CacheKind.READDIR, parent_of(path))
