"""
Image conversion helpers for inlining images into generative model requests.
"""

import base64
import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from adstudio.core.exceptions import UnsupportedImageError
from adstudio.core.pyd_schemas import InlineImage

logger = logging.getLogger(__name__)

# Formats the generative model accepts without conversion
SUPPORTED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


def convert_to_jpeg(data: bytes, quality: int = 90) -> bytes:
    """Re-encode arbitrary image bytes as JPEG.

    Transparent images are flattened onto white since JPEG has no alpha.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.mode in ("RGBA", "LA") or (
                img.mode == "P" and "transparency" in img.info
            ):
                rgba = img.convert("RGBA")
                background = Image.new("RGB", rgba.size, (255, 255, 255))
                background.paste(rgba, mask=rgba.split()[-1])
                converted = background
            else:
                converted = img.convert("RGB")
            out = io.BytesIO()
            converted.save(out, format="JPEG", quality=quality)
            return out.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedImageError(f"Failed to convert image to JPEG: {e}") from e


def process_image_for_inline(
    data: bytes, mime_type: Optional[str], *, jpeg_quality: int = 90
) -> InlineImage:
    """Return a base64 payload in a supported format, converting when needed."""
    mime = (mime_type or "image/jpeg").lower()
    if mime in SUPPORTED_MIME_TYPES:
        return InlineImage(base64=base64.b64encode(data).decode("ascii"), mime_type=mime)

    logger.info("Unsupported image format %s, converting to JPEG", mime)
    try:
        converted = convert_to_jpeg(data, quality=jpeg_quality)
    except UnsupportedImageError as e:
        e.mime_type = mime
        raise
    return InlineImage(
        base64=base64.b64encode(converted).decode("ascii"), mime_type="image/jpeg"
    )
