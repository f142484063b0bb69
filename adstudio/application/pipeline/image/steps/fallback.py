from __future__ import annotations

import logging
from typing import Optional

from adstudio.application.pipeline.base import BaseStep, PipelineContext
from adstudio.core.pyd_schemas import ImageProcessingResult, ProcessingMethod

logger = logging.getLogger(__name__)


class FallbackStep(BaseStep[ImageProcessingResult]):
    name = "fallback"

    def __init__(self, fallback_url: str) -> None:
        self.fallback_url = fallback_url

    async def run(self, context: PipelineContext) -> Optional[ImageProcessingResult]:
        logger.warning("All image processing methods failed, using fallback")
        return ImageProcessingResult(
            processed_url=self.fallback_url,
            original_url=context.get("url") or str(context.input.get("url") or ""),
            processing_method=ProcessingMethod.fallback,
            error="Original image not accessible, using fallback",
        )
