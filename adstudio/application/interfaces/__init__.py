from .image_prober import IImageProber
from .cache_store import ICacheStore
from .product_scraper import IProductScraper
from .image_inliner import IImageInliner
from .utils import IClock
from .service_adapters import IServiceAdapters

__all__ = [
    "IImageProber",
    "ICacheStore",
    "IProductScraper",
    "IImageInliner",
    "IClock",
    "IServiceAdapters",
]
