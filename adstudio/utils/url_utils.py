"""
URL helper functions for image resolution.
"""

import ipaddress
import logging
import re
from typing import Mapping, Optional, Union
from urllib.parse import quote, urlencode, urlparse

logger = logging.getLogger(__name__)

AMAZON_IMAGE_MARKERS = ("amazon.com", "ssl-images-amazon.com", "media-amazon.com")
IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|gif)$", re.IGNORECASE)
LOOPBACK_HOSTS = {"localhost", "localhost.localdomain"}
_INVALID_HOST_CHARS = frozenset('<>"{}|\\^`%')

# Applied in order; the first pattern strips a whole "._SX300_QL70_." block
_AMAZON_REWRITES = (
    (re.compile(r"\._.*?_\."), "."),
    (re.compile(r"\.webp$"), ".jpg"),
    (re.compile(r"FMwebp_"), ""),
    (re.compile(r"QL\d+_"), ""),
    (re.compile(r"SX\d+_"), ""),
    (re.compile(r"SY\d+_"), ""),
)


def is_valid_http_url(url: Optional[str]) -> bool:
    """Return True if ``url`` is an absolute http(s) URL with a usable host.

    The host must be an IP literal or a name whose labels IDNA-encode
    (no empty or over-long labels, no whitespace or delimiter characters).
    """
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
        # Accessing .port validates the netloc (raises on junk like "host:abc")
        parsed.port
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    return _is_valid_host(parsed.hostname)


def _is_valid_host(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    if any(ch in _INVALID_HOST_CHARS or ch.isspace() for ch in host):
        return False
    try:
        host.encode("idna")
    except UnicodeError:
        return False
    return True


def is_loopback_url(url: str) -> bool:
    """Return True when the URL points at the local machine."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return False
    if not host:
        return False
    if host.lower() in LOOPBACK_HOSTS:
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def to_absolute_url(url: str, base_origin: str) -> str:
    """Prefix root-relative paths (``/avatars/a.png``) with ``base_origin``."""
    if url.startswith("/"):
        return f"{base_origin.rstrip('/')}{url}"
    return url


def is_amazon_image_url(url: str) -> bool:
    return any(marker in url for marker in AMAZON_IMAGE_MARKERS)


def transform_amazon_image_url(url: str) -> str:
    """
    Strip size, quality and format modifiers from an Amazon CDN image URL.

    Example:
        >>> transform_amazon_image_url(
        ...     "https://m.media-amazon.com/images/I/abc._SX300_QL70_FMwebp_.jpg"
        ... )
        'https://m.media-amazon.com/images/I/abc.jpg'

    The result is only a candidate; callers must re-probe it. On any failure
    the input is returned unchanged.
    """
    try:
        transformed = url
        for pattern, replacement in _AMAZON_REWRITES:
            transformed = pattern.sub(replacement, transformed, count=1)

        if not IMAGE_EXTENSION_RE.search(transformed):
            transformed += ".jpg"
        return transformed
    except Exception as e:  # noqa: BLE001
        logger.warning("Error transforming Amazon URL %s: %s", url, e)
        return url


def build_proxy_url(
    original_url: str,
    base_url: str = "https://images.weserv.nl/",
    params: Optional[Mapping[str, Union[str, int]]] = None,
) -> str:
    """Route ``original_url`` through a public image resizing proxy.

    Pure function; the original URL is percent-encoded as the ``url`` query
    parameter, followed by the fixed output ``params``.
    """
    if params is None:
        params = {"output": "jpg", "q": 80, "w": 800, "h": 800, "fit": "inside"}
    query = urlencode({"url": original_url, **params}, safe="", quote_via=quote)
    return f"{base_url}?{query}"
