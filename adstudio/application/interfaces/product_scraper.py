from __future__ import annotations

from typing import List, Protocol

from adstudio.core.pyd_schemas import AmazonProduct


class IProductScraper(Protocol):
    """Adapter for scraping product listings from a marketplace URL.

    Implementations may call Apify, Firecrawl, etc. The application layer
    should not know about concrete providers.
    """

    async def scrape(
        self, url: str, *, max_items: int, max_pages: int
    ) -> List[AmazonProduct]:
        """Return scraped products; raise ScrapeError/ConfigurationError on failure."""
        ...
