from __future__ import annotations

from typing import Protocol


class IImageProber(Protocol):
    """Lightweight reachability check for remote images (no body download)."""

    async def probe(self, url: str) -> bool:
        """Return True only if the URL answers 2xx with an ``image/*`` content type.

        Implementations must not raise for network failures; they report False.
        """
        ...
