from typing import List, Optional

from pydantic import BaseModel, Field, HttpUrl

from adstudio.core.config import settings
from adstudio.core.pyd_schemas import AmazonProduct


class ScrapeProductRequest(BaseModel):
    url: HttpUrl
    max_items: int = settings.scrape_default_max_items
    max_pages: int = settings.scrape_default_max_pages
    force_refresh: bool = False


class CacheClearResponse(BaseModel):
    cleared: int


class CacheRemoveResponse(BaseModel):
    removed: bool


class PreloadProductsRequest(BaseModel):
    urls: List[str] = Field(default_factory=list, max_length=20)


class PreloadProductsResponse(BaseModel):
    requested: int
    fetched: int


class ProductImageRequest(BaseModel):
    product: AmazonProduct
    base_origin: Optional[str] = None
