from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from adstudio.application.interfaces import ICacheStore, IProductScraper
from adstudio.application.use_cases.image_resolve import ImageResolver
from adstudio.core.config import settings
from adstudio.core.exceptions import (
    AdStudioError,
    ProductNotFoundError,
    UnsupportedProductUrlError,
)
from adstudio.core.pyd_schemas import (
    AmazonProduct,
    CacheStats,
    ImageProcessingResult,
    ScrapeResponse,
)
from adstudio.utils.url_utils import is_valid_http_url

logger = logging.getLogger(__name__)


class ProductService:
    """Fetch product listings through the scraper with a TTL response cache.

    Only successful responses are cached. Failures come back as
    ``ScrapeResponse(success=False)`` carrying the error message and code.
    """

    def __init__(
        self,
        scraper: IProductScraper,
        cache: ICacheStore,
        *,
        cache_ttl: Optional[float] = None,
        supported_domains: Optional[Sequence[str]] = None,
    ) -> None:
        self.scraper = scraper
        self.cache = cache
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.cache_default_ttl_seconds
        self.supported_domains = list(
            supported_domains if supported_domains is not None else settings.scrape_supported_domains
        )

    async def fetch_product_data(
        self,
        url: str,
        *,
        max_items: Optional[int] = None,
        max_pages: Optional[int] = None,
        force_refresh: bool = False,
        enable_cache: bool = True,
    ) -> ScrapeResponse:
        if not self.is_supported_url(url):
            e = UnsupportedProductUrlError(url=url)
            logger.warning("Rejected product URL %s: %s", url, e.message)
            return ScrapeResponse(success=False, error=e.message, error_code=e.error_code)
        url = self.normalize_url(url)

        if enable_cache and not force_refresh:
            cached = self.cache.get(url)
            if cached is not None:
                logger.info("Cache hit - returning cached product data for: %s", url)
                return cached.model_copy(update={"cached": True})

        logger.info("Cache miss - fetching fresh product data for: %s", url)
        try:
            products = await self.scraper.scrape(
                url,
                max_items=max_items or settings.scrape_default_max_items,
                max_pages=max_pages or settings.scrape_default_max_pages,
            )
            if not products:
                raise ProductNotFoundError(url=url)
        except AdStudioError as e:
            logger.error("Error fetching product data for %s: %s", url, e.message)
            return ScrapeResponse(success=False, error=e.message, error_code=e.error_code)

        response = ScrapeResponse(success=True, data=products)
        if enable_cache:
            self.cache.set(url, response, ttl=self.cache_ttl)
            logger.info("Product data cached successfully for: %s", url)
        return response

    async def preload_product_data(self, urls: Sequence[str]) -> int:
        """Warm the cache for supported, uncached URLs in small concurrent batches.

        Returns the number of URLs fetched.
        """
        uncached = [
            url for url in urls if self.is_supported_url(url) and not self.has_cache(url)
        ]
        if not uncached:
            logger.info("All URLs already cached")
            return 0

        logger.info("Preloading %d uncached URLs", len(uncached))
        batch_size = max(1, settings.scrape_preload_batch_size)
        for i in range(0, len(uncached), batch_size):
            batch = uncached[i : i + batch_size]
            await asyncio.gather(*(self.fetch_product_data(url) for url in batch))
        return len(uncached)

    # ----- Cache passthroughs -----
    def _cache_key(self, url: str) -> str:
        return self.normalize_url(url) if is_valid_http_url(url) else url

    def has_cache(self, url: str) -> bool:
        return self.cache.has(self._cache_key(url))

    def get_cached_data(self, url: str) -> Optional[ScrapeResponse]:
        return self.cache.get(self._cache_key(url))

    def clear_cache(self, url: str) -> bool:
        return self.cache.remove(self._cache_key(url))

    def clear_all_cache(self) -> int:
        return self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def cleanup_cache(self) -> int:
        return self.cache.cleanup_expired()

    # ----- URL helpers -----
    @staticmethod
    def normalize_url(url: str) -> str:
        if not is_valid_http_url(url):
            raise ValueError("Invalid URL provided")
        parsed = urlparse(url)
        # Lowercase scheme/host and ensure a path, like a URL parser's href
        return parsed._replace(
            scheme=parsed.scheme.lower(),
            netloc=parsed.netloc.lower(),
            path=parsed.path or "/",
        ).geturl()

    def is_supported_url(self, url: str) -> bool:
        if not is_valid_http_url(url):
            return False
        host = (urlparse(url).hostname or "").lower()
        return any(domain in host for domain in self.supported_domains)

    # ----- Images -----
    @staticmethod
    def candidate_image_urls(product: AmazonProduct) -> List[str]:
        """High-resolution images first, then the thumbnail, without duplicates."""
        candidates: List[str] = []
        for url in (product.high_resolution_images or []) + [product.thumbnail_image or ""]:
            if url and url not in candidates:
                candidates.append(url)
        return candidates

    async def resolve_product_image(
        self,
        product: AmazonProduct,
        resolver: ImageResolver,
        base_origin: Optional[str] = None,
    ) -> ImageProcessingResult:
        return await resolver.get_best_image_url(
            self.candidate_image_urls(product), base_origin
        )
