from __future__ import annotations

import logging
from typing import Optional

from adstudio.application.interfaces import IImageInliner
from adstudio.core.config import settings
from adstudio.core.exceptions import InvalidImageUrlError
from adstudio.core.pyd_schemas import InlineImage
from adstudio.utils.download_utils import fetch_bytes
from adstudio.utils.image_utils import process_image_for_inline
from adstudio.utils.url_utils import is_valid_http_url

logger = logging.getLogger(__name__)


class HttpImageInliner(IImageInliner):
    """Download an image and return it base64-encoded in a supported format."""

    def __init__(self, *, jpeg_quality: Optional[int] = None) -> None:
        self.jpeg_quality = jpeg_quality or settings.image_inline_jpeg_quality

    async def inline(self, url: str) -> InlineImage:
        if not is_valid_http_url(url):
            raise InvalidImageUrlError(f"Invalid image URL format: {url}", url=url)

        data, content_type = await fetch_bytes(url)
        # Servers that omit the header are assumed to serve JPEG
        image = process_image_for_inline(
            data, content_type or "image/jpeg", jpeg_quality=self.jpeg_quality
        )
        logger.debug("Inlined %s as %s (%d bytes)", url, image.mime_type, len(data))
        return image
