from .image_prober_http import HttpImageProber
from .cache_memory import InMemoryTTLCache, SystemClock
from .product_scraper_apify import ApifyProductScraper
from .image_inliner_http import HttpImageInliner

__all__ = [
    "HttpImageProber",
    "InMemoryTTLCache",
    "SystemClock",
    "ApifyProductScraper",
    "HttpImageInliner",
]
