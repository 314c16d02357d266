"""
In-memory detection cache with per-entry TTL.

Entries expire lazily: ``get`` treats an entry older than its TTL as absent and
evicts it on the spot. There is no sweeper thread and nothing is written to
disk; the cache lives as long as the process (or the engine that owns it).
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from .detection import ToolInfo

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass(frozen=True)
class CacheEntry:
    """A cached ToolInfo with its creation time and validity window."""
    value: ToolInfo
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache counters."""
    size: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "size": self.size,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
        }


class DetectionCache:
    """
    Thread-safe key -> ToolInfo store with lazy expiry.

    Attributes:
        default_ttl: TTL in seconds used when ``set`` is called without one
        max_entries: Optional bound (0 = unbounded); oldest entry evicted first
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError(f"Invalid ttl: {ttl}. Must be positive")
        if max_entries < 0:
            raise ValueError(f"Invalid max_entries: {max_entries}. Must be >= 0")
        self.default_ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> ToolInfo | None:
        """Return the cached value, or None if missing or expired (expired entries are evicted)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: ToolInfo, ttl: float | None = None) -> None:
        """Store a value, replacing any previous entry for the key."""
        effective_ttl = self.default_ttl if ttl is None else ttl
        if effective_ttl <= 0:
            raise ValueError(f"Invalid ttl: {effective_ttl}. Must be positive")
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(value=value, timestamp=self._clock(), ttl=effective_ttl)
            if self.max_entries:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def has(self, key: str) -> bool:
        """True if a non-expired entry exists (same expiry side effect as get)."""
        return self.get(key) is not None

    def invalidate(self, key: str) -> None:
        """Drop one entry; unknown keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), hits=self._hits, misses=self._misses)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.has(key)
