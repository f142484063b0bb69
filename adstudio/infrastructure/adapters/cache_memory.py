from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from adstudio.application.interfaces import ICacheStore, IClock
from adstudio.core.config import settings
from adstudio.core.pyd_schemas import CacheStats

logger = logging.getLogger(__name__)


class SystemClock(IClock):
    def now(self) -> float:
        return time.time()


@dataclass(slots=True)
class CacheEntry:
    value: Any
    created_at: float
    expires_at: float
    key: str


class InMemoryTTLCache(ICacheStore):
    """Process-local TTL cache keyed by normalized URL.

    One instance is created per application (see presentation lifespan) and
    handed to consumers explicitly; tests build their own.
    """

    def __init__(
        self,
        *,
        default_ttl: Optional[float] = None,
        prefix: Optional[str] = None,
        clock: Optional[IClock] = None,
    ) -> None:
        self.default_ttl = float(
            default_ttl if default_ttl is not None else settings.cache_default_ttl_seconds
        )
        self.prefix = prefix if prefix is not None else settings.cache_key_prefix
        self.clock = clock or SystemClock()
        self._entries: Dict[str, CacheEntry] = {}

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key.strip().lower()}"

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        cache_key = self._key(key)
        entry = self._entries.get(cache_key)
        if entry is None:
            return None
        if self.clock.now() > entry.expires_at:
            logger.info("Cache expired for key: %s", key)
            del self._entries[cache_key]
            return None
        return entry

    def get(self, key: str) -> Optional[Any]:
        entry = self._live_entry(key)
        if entry is None:
            return None
        logger.debug("Cache hit for key: %s", key)
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        now = self.clock.now()
        ttl_s = self.default_ttl if ttl is None else float(ttl)
        self._entries[self._key(key)] = CacheEntry(
            value=value, created_at=now, expires_at=now + ttl_s, key=key.strip()
        )
        logger.debug("Cached value for key: %s (ttl=%.0fs)", key, ttl_s)
        return True

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def remove(self, key: str) -> bool:
        removed = self._entries.pop(self._key(key), None) is not None
        if removed:
            logger.info("Removed cache for key: %s", key)
        return removed

    def clear(self) -> int:
        cleared = len(self._entries)
        self._entries.clear()
        logger.info("Cleared %d cache entries", cleared)
        return cleared

    def cleanup_expired(self) -> int:
        now = self.clock.now()
        expired = [k for k, e in self._entries.items() if now > e.expires_at]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.info("Cleaned up %d expired cache entries", len(expired))
        return len(expired)

    def stats(self) -> CacheStats:
        """Entry count, approximate serialized size and oldest entry time."""
        if not self._entries:
            return CacheStats()

        total_size = 0
        for entry in self._entries.values():
            total_size += len(_serialize(entry.value))
        oldest = min(e.created_at for e in self._entries.values())
        return CacheStats(
            total_entries=len(self._entries),
            total_size=total_size,
            oldest_entry=datetime.fromtimestamp(oldest),
        )


def _serialize(value: Any) -> str:
    if hasattr(value, "model_dump_json"):
        return value.model_dump_json()
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)
