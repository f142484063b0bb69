from __future__ import annotations

import logging
from typing import Optional

from adstudio.application.pipeline.base import BaseStep, PipelineContext
from adstudio.core.pyd_schemas import ImageProcessingResult, ProcessingMethod

logger = logging.getLogger(__name__)


class EmptyInputStep(BaseStep[ImageProcessingResult]):
    """Short-circuit blank input straight to the placeholder, without any probe."""

    name = "empty_input"

    def __init__(self, fallback_url: str) -> None:
        self.fallback_url = fallback_url

    async def run(self, context: PipelineContext) -> Optional[ImageProcessingResult]:
        raw = context.input.get("url")
        if raw is None or not str(raw).strip():
            logger.info("Empty image URL provided, using fallback")
            return ImageProcessingResult(
                processed_url=self.fallback_url,
                original_url=raw or "",
                processing_method=ProcessingMethod.fallback,
                error="Empty image URL provided",
            )
        return None
