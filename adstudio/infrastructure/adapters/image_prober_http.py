from __future__ import annotations

import asyncio
import logging
from typing import Optional, Tuple

import aiohttp

from adstudio.application.interfaces import IImageProber
from adstudio.core.config import settings
from adstudio.utils.url_utils import is_loopback_url

logger = logging.getLogger(__name__)


class HttpImageProber(IImageProber):
    """IImageProber implementation issuing HEAD requests with aiohttp.

    Each attempt has its own timeout. Any failure (transport error, timeout,
    non-2xx status, non-image content type) consumes one attempt; between
    attempts the prober sleeps ``backoff_base * attempt`` seconds. A URL the
    client refuses to encode is reported inaccessible without further attempts.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_base: Optional[float] = None,
        skip_loopback: Optional[bool] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.image_probe_timeout
        self.max_attempts = max(
            1,
            max_attempts if max_attempts is not None else settings.image_probe_max_attempts,
        )
        self.backoff_base = (
            backoff_base if backoff_base is not None else settings.image_probe_backoff_base
        )
        self.skip_loopback = (
            settings.image_probe_skip_loopback if skip_loopback is None else skip_loopback
        )
        self.user_agent = user_agent or settings.image_probe_user_agent
        self._sleep = asyncio.sleep

    async def probe(self, url: str) -> bool:
        if self.skip_loopback and is_loopback_url(url):
            logger.debug("Skipping accessibility check for local URL: %s", url)
            return True

        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        headers = {"User-Agent": self.user_agent}
        async with aiohttp.ClientSession(timeout=client_timeout, headers=headers) as session:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    status, content_type = await self._head(session, url)
                    if 200 <= status < 300:
                        is_image = (content_type or "").lower().startswith("image/")
                        logger.debug(
                            "Content-Type for %s: %s, isImage: %s", url, content_type, is_image
                        )
                        if is_image:
                            return True
                    else:
                        logger.debug("HTTP %d for %s", status, url)
                except ValueError as e:
                    # Unencodable host, e.g. an empty or over-long IDNA label
                    logger.info("Image URL not requestable %s: %s", url, e)
                    return False
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    logger.debug(
                        "Attempt %d/%d failed for %s: %s",
                        attempt,
                        self.max_attempts,
                        url,
                        e or type(e).__name__,
                    )

                if attempt < self.max_attempts:
                    await self._sleep(self.backoff_base * attempt)

        logger.info("Image not accessible after %d attempts: %s", self.max_attempts, url)
        return False

    async def _head(
        self, session: aiohttp.ClientSession, url: str
    ) -> Tuple[int, Optional[str]]:
        """Single HEAD request; returns (status, content-type)."""
        async with session.head(url, allow_redirects=True) as response:
            return response.status, response.headers.get("Content-Type")
