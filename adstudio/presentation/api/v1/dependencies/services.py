from fastapi import Depends, Request

from adstudio.application.interfaces import ICacheStore, IImageInliner
from adstudio.application.use_cases.image_resolve import ImageResolver
from adstudio.application.use_cases.product_fetch import ProductService
from adstudio.infrastructure.adapters.bundles.services import get_adapter_bundle


def get_product_cache(request: Request) -> ICacheStore:
    """Application-scoped cache created in the lifespan handler."""
    return request.app.state.product_cache


def get_image_resolver() -> ImageResolver:
    adapters = get_adapter_bundle()
    return ImageResolver(adapters.prober)


def get_image_inliner() -> IImageInliner:
    return get_adapter_bundle().inliner


def get_product_service(cache: ICacheStore = Depends(get_product_cache)) -> ProductService:
    adapters = get_adapter_bundle()
    return ProductService(adapters.scraper, cache)
