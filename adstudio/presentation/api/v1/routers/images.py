"""
Image resolution API endpoints
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from adstudio.application.interfaces import IImageInliner
from adstudio.application.use_cases.image_resolve import ImageResolver
from adstudio.core.pyd_schemas import ImageProcessingResult, InlineImage
from adstudio.presentation.api.v1.dependencies.services import (
    get_image_inliner,
    get_image_resolver,
)
from adstudio.presentation.api.v1.schemas.images import (
    InlineImageRequest,
    ResolveImageRequest,
    ResolveImagesRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


@router.post("/resolve", response_model=ImageProcessingResult)
async def resolve_image(
    body: ResolveImageRequest,
    resolver: ImageResolver = Depends(get_image_resolver),
):
    """Resolve a single image URL to something the AI provider can fetch."""
    return await resolver.process_image_url(body.url, body.base_origin)


@router.post("/resolve-batch", response_model=List[ImageProcessingResult])
async def resolve_images(
    body: ResolveImagesRequest,
    resolver: ImageResolver = Depends(get_image_resolver),
):
    """Resolve several URLs concurrently; one result per input, same order."""
    return await resolver.process_multiple_image_urls(body.urls, body.base_origin)


@router.post("/best", response_model=ImageProcessingResult)
async def best_image(
    body: ResolveImagesRequest,
    resolver: ImageResolver = Depends(get_image_resolver),
):
    """Return the highest-priority resolution among candidate URLs."""
    return await resolver.get_best_image_url(body.urls, body.base_origin)


@router.post("/inline", response_model=InlineImage)
async def inline_image(
    body: InlineImageRequest,
    inliner: IImageInliner = Depends(get_image_inliner),
):
    """Download an image and return it base64-encoded for model requests."""
    return await inliner.inline(body.url)
