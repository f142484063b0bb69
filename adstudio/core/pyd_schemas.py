from __future__ import annotations

from enum import Enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, constr
from pydantic.alias_generators import to_camel


class ProcessingMethod(str, Enum):
    """Pipeline stage that produced the final image URL, best first."""

    original = "original"
    converted = "converted"
    proxy = "proxy"
    fallback = "fallback"


# Selection order used when choosing between candidate results
METHOD_PRIORITY: List[ProcessingMethod] = [
    ProcessingMethod.original,
    ProcessingMethod.converted,
    ProcessingMethod.proxy,
    ProcessingMethod.fallback,
]


class ImageProcessingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    processed_url: constr(min_length=1)
    is_valid: bool = True
    original_url: str
    processing_method: ProcessingMethod
    error: Optional[str] = None


class InlineImage(BaseModel):
    """Image payload ready to inline into a generative model request."""

    base64: str
    mime_type: str


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class Price(_CamelModel):
    value: Optional[float] = None
    currency: Optional[str] = None


class Attribute(_CamelModel):
    key: Optional[str] = None
    value: Optional[str] = None


class Seller(_CamelModel):
    name: Optional[str] = None
    id: Optional[str] = None
    url: Optional[str] = None
    reviews_count: Optional[int] = None
    average_rating: Optional[float] = None


class AmazonProduct(_CamelModel):
    """Subset of the scraper's product listing fields used downstream."""

    title: Optional[str] = None
    url: Optional[str] = None
    asin: Optional[str] = None
    price: Optional[Price] = None
    in_stock: Optional[bool] = None
    brand: Optional[str] = None
    stars: Optional[float] = None
    reviews_count: Optional[int] = None
    thumbnail_image: Optional[str] = None
    high_resolution_images: Optional[List[str]] = None
    description: Optional[str] = None
    features: Optional[List[str]] = None
    attributes: Optional[List[Attribute]] = None
    delivery: Optional[str] = None
    seller: Optional[Seller] = None


class ScrapeResponse(_CamelModel):
    success: bool
    data: Optional[List[AmazonProduct]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    cached: bool = False


class CacheStats(_CamelModel):
    total_entries: int = 0
    total_size: int = 0
    oldest_entry: Optional[datetime] = None
