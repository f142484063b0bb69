from __future__ import annotations

from typing import Any, Optional, Protocol

from adstudio.core.pyd_schemas import CacheStats


class ICacheStore(Protocol):
    """Key-value store with per-entry expiry."""

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on miss or expiry."""
        ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        ...

    def has(self, key: str) -> bool:
        ...

    def remove(self, key: str) -> bool:
        ...

    def clear(self) -> int:
        """Drop every entry; return how many were removed."""
        ...

    def cleanup_expired(self) -> int:
        ...

    def stats(self) -> CacheStats:
        ...
