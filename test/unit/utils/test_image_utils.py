"""Unit tests for inline image conversion helpers."""

import base64
import io

import pytest
from PIL import Image

from adstudio.core.exceptions import UnsupportedImageError
from adstudio.utils.image_utils import convert_to_jpeg, process_image_for_inline


def _image_bytes(fmt: str, mode: str = "RGB", size=(8, 8)) -> bytes:
    img = Image.new(mode, size, color=(255, 0, 0, 128) if mode == "RGBA" else (255, 0, 0))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def test_supported_format_is_passed_through_untouched():
    data = _image_bytes("PNG")
    out = process_image_for_inline(data, "image/png")
    assert out.mime_type == "image/png"
    assert base64.b64decode(out.base64) == data


def test_missing_mime_type_defaults_to_jpeg_passthrough():
    data = _image_bytes("JPEG")
    out = process_image_for_inline(data, None)
    assert out.mime_type == "image/jpeg"
    assert base64.b64decode(out.base64) == data


def test_unsupported_format_is_converted_to_jpeg():
    data = _image_bytes("GIF")
    out = process_image_for_inline(data, "image/gif")
    assert out.mime_type == "image/jpeg"
    decoded = base64.b64decode(out.base64)
    with Image.open(io.BytesIO(decoded)) as img:
        assert img.format == "JPEG"
        assert img.size == (8, 8)


def test_transparent_image_is_flattened():
    data = _image_bytes("TIFF", mode="RGBA")
    jpeg = convert_to_jpeg(data)
    with Image.open(io.BytesIO(jpeg)) as img:
        assert img.mode == "RGB"


def test_garbage_bytes_raise_unsupported_image_error():
    with pytest.raises(UnsupportedImageError) as exc_info:
        process_image_for_inline(b"definitely not an image", "image/bmp")
    assert exc_info.value.mime_type == "image/bmp"
