from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from adstudio.application.interfaces import IProductScraper
from adstudio.core.config import settings
from adstudio.core.exceptions import ConfigurationError, ScrapeError
from adstudio.core.pyd_schemas import AmazonProduct

logger = logging.getLogger(__name__)


class ApifyProductScraper(IProductScraper):
    """IProductScraper backed by an Apify actor.

    Uses the synchronous ``run-sync-get-dataset-items`` endpoint so a single
    request starts the actor, waits for it and returns the dataset items.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        actor_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.token = token if token is not None else settings.apify_token
        self.actor_id = actor_id or settings.apify_actor_id
        self.base_url = (base_url or settings.apify_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.apify_timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/acts/{self.actor_id}/run-sync-get-dataset-items"

    @staticmethod
    def build_input(url: str, *, max_items: int, max_pages: int) -> Dict[str, Any]:
        # categoryUrls accepts both category and product URLs
        return {
            "categoryUrls": [{"url": url}],
            "maxItemsPerStartUrl": max_items,
            "maxSearchPagesPerStartUrl": max_pages,
            "scrapeProductDetails": True,
            "useCaptchaSolver": False,
            "scrapeProductVariantPrices": False,
            "ensureLoadedProductDescriptionFields": True,
        }

    async def scrape(
        self, url: str, *, max_items: int, max_pages: int
    ) -> List[AmazonProduct]:
        if not self.token:
            raise ConfigurationError(
                "Apify token is not configured. Please set APIFY_TOKEN in environment variables.",
                config_key="apify_token",
            )

        payload = self.build_input(url, max_items=max_items, max_pages=max_pages)
        logger.info("Starting Apify scraper %s for %s", self.actor_id, url)
        items = await self._run_actor(payload, url)
        logger.info("Apify run completed for %s with %d items", url, len(items))
        return self.parse_items(items)

    async def _run_actor(self, payload: Dict[str, Any], url: str) -> List[Any]:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.endpoint, params={"token": self.token}, json=payload
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise ScrapeError(
                            f"Apify run failed with HTTP {response.status}: {body[:200]}",
                            url=url,
                        )
                    items = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ScrapeError(f"Apify request failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise ScrapeError("Apify request timed out", url=url) from e

        if not isinstance(items, list):
            raise ScrapeError("Unexpected Apify response format", url=url)
        return items

    @staticmethod
    def parse_items(items: List[Any]) -> List[AmazonProduct]:
        products: List[AmazonProduct] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                products.append(AmazonProduct.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed product item: %s", e)
        return products
