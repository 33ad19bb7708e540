# ABOUTME: In-memory LRU tier for cached HTTP responses bounded by total byte size
# ABOUTME: Volatile and independent of the disk tier; stale entries are kept for revalidation

import threading
from collections import OrderedDict
from typing import Any, Dict, Optional

from models import CachedResponse


class MemoryCache:
    """In-memory LRU cache for HTTP responses."""

    def __init__(self, capacity_bytes: int):
        """Initialize memory cache with a byte capacity."""
        self.capacity_bytes = capacity_bytes
        self.cache: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self.current_size = 0
        self.hits = 0
        self.misses = 0
        self.total_requests = 0
        self._lock = threading.RLock()

    def set(self, key: str, value: CachedResponse, size: Optional[int] = None) -> bool:
        """Store a response; returns False when it can never fit."""
        entry_size = len(value.body) if size is None else size
        if entry_size > self.capacity_bytes:
            return False

        with self._lock:
            # Remove key if it already exists
            if key in self.cache:
                old_entry = self.cache.pop(key)
                self.current_size -= old_entry["size"]

            self.cache[key] = {"value": value, "size": entry_size}
            self.current_size += entry_size

            self._evict_if_needed()
        return True

    def get(self, key: str) -> Optional[CachedResponse]:
        with self._lock:
            self.total_requests += 1

            entry = self.cache.get(key)
            if entry is None:
                self.misses += 1
                return None

            # Move to end (most recently used)
            self.cache.move_to_end(key)
            self.hits += 1
            return entry["value"]  # type: ignore[no-any-return]

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self.cache

    def remove(self, key: str) -> bool:
        with self._lock:
            entry = self.cache.pop(key, None)
            if entry is None:
                return False
            self.current_size -= entry["size"]
            return True

    def _evict_if_needed(self) -> None:
        """Evict least recently used items if cache is over size limit."""
        while self.current_size > self.capacity_bytes and self.cache:
            _, oldest_entry = self.cache.popitem(last=False)
            self.current_size -= oldest_entry["size"]

    def clear(self) -> None:
        """Clear all cached items."""
        with self._lock:
            self.cache.clear()
            self.current_size = 0

    def __len__(self) -> int:
        return len(self.cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            hit_rate = self.hits / max(self.total_requests, 1)
            return {
                "hits": self.hits,
                "misses": self.misses,
                "total_requests": self.total_requests,
                "hit_rate": hit_rate,
                "current_size_bytes": self.current_size,
                "current_entries": len(self.cache),
                "max_size_bytes": self.capacity_bytes,
            }
