from __future__ import annotations

from typing import Protocol

from adstudio.core.pyd_schemas import InlineImage


class IImageInliner(Protocol):
    """Downloads an image and returns it as a base64 payload with a supported mime type."""

    async def inline(self, url: str) -> InlineImage:
        ...
