"""
Download utility functions.
"""

import asyncio
import logging
from typing import Optional, Tuple

import aiohttp

from adstudio.core.config import settings
from adstudio.core.exceptions import ImageFetchError

logger = logging.getLogger(__name__)


async def fetch_bytes(
    url: str,
    *,
    timeout: Optional[float] = None,
    user_agent: Optional[str] = None,
    max_bytes: Optional[int] = None,
) -> Tuple[bytes, Optional[str]]:
    """
    Download a resource into memory, refusing bodies larger than ``max_bytes``.

    Args:
        url: Source URL to download from
        timeout: Total timeout in seconds (defaults to settings.image_fetch_timeout)
        user_agent: Optional User-Agent header
        max_bytes: Body size limit (defaults to settings.image_inline_max_bytes)

    Returns:
        Tuple of (body bytes, content-type without parameters or None)

    Raises:
        ImageFetchError: on non-2xx status, oversized body or transport failure
    """
    client_timeout = aiohttp.ClientTimeout(
        total=timeout if timeout is not None else settings.image_fetch_timeout
    )
    limit = max_bytes if max_bytes is not None else settings.image_inline_max_bytes
    headers = {"User-Agent": user_agent or settings.image_probe_user_agent}
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url, headers=headers) as response:
                if response.status < 200 or response.status >= 300:
                    raise ImageFetchError(
                        f"Failed to fetch image: {response.status}",
                        url=url,
                        status=response.status,
                    )
                if response.content_length is not None and response.content_length > limit:
                    raise ImageFetchError(
                        f"Image too large: {response.content_length} bytes (limit {limit})",
                        url=url,
                    )

                buffer = bytearray()
                async for chunk in response.content.iter_chunked(8192):
                    buffer.extend(chunk)
                    if len(buffer) > limit:
                        raise ImageFetchError(
                            f"Image too large: exceeds {limit} bytes", url=url
                        )

                content_type = response.headers.get("Content-Type")
                if content_type:
                    content_type = content_type.split(";")[0].strip().lower()
                logger.debug("Downloaded %d bytes from %s (%s)", len(buffer), url, content_type)
                return bytes(buffer), content_type
    except ImageFetchError:
        raise
    except aiohttp.ClientError as e:
        logger.error("Failed to download %s: %s", url, str(e))
        raise ImageFetchError(f"Failed to download {url}: {e}", url=url) from e
    except asyncio.TimeoutError as e:
        logger.error("Timed out downloading %s", url)
        raise ImageFetchError(f"Timed out downloading {url}", url=url) from e
