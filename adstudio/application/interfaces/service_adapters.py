from __future__ import annotations

from typing import Protocol, runtime_checkable

from .image_prober import IImageProber
from .product_scraper import IProductScraper
from .image_inliner import IImageInliner


@runtime_checkable
class IServiceAdapters(Protocol):
    prober: IImageProber
    scraper: IProductScraper
    inliner: IImageInliner
