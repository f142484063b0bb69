"""
Product scraping and cache API endpoints
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from adstudio.application.use_cases.image_resolve import ImageResolver
from adstudio.application.use_cases.product_fetch import ProductService
from adstudio.core.pyd_schemas import CacheStats, ImageProcessingResult, ScrapeResponse
from adstudio.presentation.api.v1.dependencies.services import (
    get_image_resolver,
    get_product_service,
)
from adstudio.presentation.api.v1.schemas.products import (
    CacheClearResponse,
    CacheRemoveResponse,
    PreloadProductsRequest,
    PreloadProductsResponse,
    ProductImageRequest,
    ScrapeProductRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

# error_code -> HTTP status for failed scrapes
SCRAPE_ERROR_STATUS = {
    "UNSUPPORTED_URL": 400,
    "CONFIGURATION_ERROR": 503,
    "PRODUCT_NOT_FOUND": 404,
}


@router.post("/scrape", response_model=ScrapeResponse)
async def scrape_product(
    body: ScrapeProductRequest,
    service: ProductService = Depends(get_product_service),
):
    """Scrape product data for a marketplace URL, served from cache when fresh."""
    response = await service.fetch_product_data(
        str(body.url),
        max_items=body.max_items,
        max_pages=body.max_pages,
        force_refresh=body.force_refresh,
    )
    if response.success:
        return response

    status = SCRAPE_ERROR_STATUS.get(response.error_code or "", 500)
    return JSONResponse(
        status_code=status,
        content=response.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.post("/preload", response_model=PreloadProductsResponse)
async def preload_products(
    body: PreloadProductsRequest,
    service: ProductService = Depends(get_product_service),
):
    """Warm the cache for supported URLs that are not cached yet."""
    fetched = await service.preload_product_data(body.urls)
    return PreloadProductsResponse(requested=len(body.urls), fetched=fetched)


@router.post("/image", response_model=ImageProcessingResult)
async def product_image(
    body: ProductImageRequest,
    service: ProductService = Depends(get_product_service),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    """Pick the best fetchable image among a product's candidates."""
    return await service.resolve_product_image(body.product, resolver, body.base_origin)


@router.get("/cache/stats", response_model=CacheStats)
async def cache_stats(service: ProductService = Depends(get_product_service)):
    return service.cache_stats()


@router.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(service: ProductService = Depends(get_product_service)):
    return CacheClearResponse(cleared=service.clear_all_cache())


@router.delete("/cache/entry", response_model=CacheRemoveResponse)
async def remove_cache_entry(
    url: str = Query(..., min_length=1),
    service: ProductService = Depends(get_product_service),
):
    return CacheRemoveResponse(removed=service.clear_cache(url))


@router.post("/cache/cleanup", response_model=CacheClearResponse)
async def cleanup_cache(service: ProductService = Depends(get_product_service)):
    """Drop expired entries only."""
    return CacheClearResponse(cleared=service.cleanup_cache())
