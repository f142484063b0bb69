from __future__ import annotations

import logging
from typing import Optional

from adstudio.application.interfaces import IImageProber
from adstudio.application.pipeline.base import BaseStep, PipelineContext
from adstudio.core.pyd_schemas import ImageProcessingResult, ProcessingMethod

logger = logging.getLogger(__name__)


class DirectProbeStep(BaseStep[ImageProcessingResult]):
    name = "direct_probe"
    required_keys = ["url", "validated"]

    def __init__(self, prober: IImageProber) -> None:
        self.prober = prober

    async def run(self, context: PipelineContext) -> Optional[ImageProcessingResult]:
        url: str = context.get("url")
        if await self.prober.probe(url):
            logger.info("Image URL is accessible: %s", url)
            return ImageProcessingResult(
                processed_url=url,
                original_url=url,
                processing_method=ProcessingMethod.original,
            )
        return None
