"""
In-memory TTL cache for upstream 1inch responses.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class SimpleCache:
    """In-memory cache with per-entry TTL and oldest-first eviction"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.cache: Dict[str, Tuple[Any, datetime, datetime]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        entry = self.cache.get(key)
        if entry is not None:
            data, created, expires = entry
            if datetime.now() < expires:
                self.hits += 1
                return data
            del self.cache[key]
        self.misses += 1
        return None

    def set(self, key: str, data: Any, ttl_seconds: int = 60):
        if key not in self.cache and len(self.cache) >= self.max_entries:
            self.cleanup()
            if len(self.cache) >= self.max_entries:
                self.evict_oldest()
        now = datetime.now()
        self.cache[key] = (data, now, now + timedelta(seconds=ttl_seconds))

    def evict_oldest(self) -> int:
        """Drop the oldest 10% of entries (at least one)"""
        if not self.cache:
            return 0
        ordered = sorted(self.cache.items(), key=lambda item: item[1][1])
        count = math.ceil(len(ordered) * 0.1)
        for key, _ in ordered[:count]:
            del self.cache[key]
        logger.info("Cache eviction: removed %d oldest entries", count)
        return count

    def cleanup(self) -> int:
        """Remove expired entries"""
        now = datetime.now()
        expired = [key for key, (_, _, expires) in self.cache.items() if expires <= now]
        for key in expired:
            del self.cache[key]
        return len(expired)

    def clear(self):
        self.cache.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict:
        total = self.hits + self.misses
        oldest = min((created for _, created, _ in self.cache.values()), default=None)
        return {
            "size": len(self.cache),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / total, 4) if total else 0.0,
            "oldest_entry": oldest.isoformat() if oldest else None,
        }
