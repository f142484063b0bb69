from __future__ import annotations

import logging
from typing import Optional

from adstudio.application.interfaces import IImageProber
from adstudio.application.pipeline.base import BaseStep, PipelineContext
from adstudio.core.pyd_schemas import ImageProcessingResult, ProcessingMethod
from adstudio.utils.url_utils import is_amazon_image_url, transform_amazon_image_url

logger = logging.getLogger(__name__)


class AmazonRewriteStep(BaseStep[ImageProcessingResult]):
    """Retry Amazon CDN images with size/quality/format modifiers stripped."""

    name = "amazon_rewrite"
    required_keys = ["url", "validated"]

    def __init__(self, prober: IImageProber) -> None:
        self.prober = prober

    def can_skip(self, context: PipelineContext) -> bool:
        return not is_amazon_image_url(context.get("url") or "")

    async def run(self, context: PipelineContext) -> Optional[ImageProcessingResult]:
        url: str = context.get("url")
        transformed = transform_amazon_image_url(url)
        if transformed == url:
            return None

        context.set("converted_url", transformed)
        if await self.prober.probe(transformed):
            logger.info("Transformed Amazon image URL is accessible: %s", transformed)
            return ImageProcessingResult(
                processed_url=transformed,
                original_url=url,
                processing_method=ProcessingMethod.converted,
            )
        return None
