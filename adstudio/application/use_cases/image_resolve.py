from __future__ import annotations

import asyncio
import logging
from typing import List, Mapping, Optional, Sequence, Union

from adstudio.application.interfaces import IImageProber
from adstudio.application.pipeline.base import PipelineContext, make_logging_middleware
from adstudio.application.pipeline.image.builder import build_image_resolution_pipeline
from adstudio.core.config import settings
from adstudio.core.exceptions import InvalidImageUrlError
from adstudio.core.pyd_schemas import (
    METHOD_PRIORITY,
    ImageProcessingResult,
    ProcessingMethod,
)

logger = logging.getLogger(__name__)


class ImageResolver:
    """Turn arbitrary product image URLs into URLs an AI provider can fetch.

    Every public coroutine returns an ``ImageProcessingResult``; failures are
    encoded in ``processing_method``/``error`` and never raised. Only
    cancellation of the calling task propagates.
    """

    def __init__(
        self,
        prober: IImageProber,
        *,
        fallback_url: Optional[str] = None,
        default_base_origin: Optional[str] = None,
        proxy_base_url: Optional[str] = None,
        proxy_params: Optional[Mapping[str, Union[str, int]]] = None,
        lenient_original: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.prober = prober
        self.fallback_url = fallback_url or settings.image_fallback_url
        self.default_base_origin = (
            default_base_origin or settings.image_default_base_origin
        )
        self.proxy_base_url = proxy_base_url or settings.image_proxy_base_url
        self.proxy_params = dict(
            proxy_params if proxy_params is not None else settings.proxy_params
        )
        self.lenient_original = (
            settings.image_lenient_original
            if lenient_original is None
            else lenient_original
        )
        self.timeout = timeout if timeout is not None else settings.image_resolve_timeout

    def _fallback(self, original_url: str, error: str) -> ImageProcessingResult:
        return ImageProcessingResult(
            processed_url=self.fallback_url,
            original_url=original_url,
            processing_method=ProcessingMethod.fallback,
            error=error,
        )

    async def process_image_url(
        self, image_url: str, base_origin: Optional[str] = None
    ) -> ImageProcessingResult:
        """Resolve one URL through the ordered pipeline."""
        ctx = PipelineContext(input={"url": image_url, "base_origin": base_origin})
        pipeline = build_image_resolution_pipeline(
            self.prober,
            fallback_url=self.fallback_url,
            default_base_origin=self.default_base_origin,
            proxy_base_url=self.proxy_base_url,
            proxy_params=self.proxy_params,
            middlewares=[make_logging_middleware(logger, level_after=logging.DEBUG)],
        )

        try:
            if self.timeout:
                outcome = await asyncio.wait_for(
                    pipeline.execute(ctx), timeout=self.timeout
                )
            else:
                outcome = await pipeline.execute(ctx)
        except InvalidImageUrlError as e:
            logger.warning("Invalid image URL %r: %s", image_url, e.message)
            return self._fallback(ctx.get("url") or image_url, e.message)
        except asyncio.TimeoutError:
            return self._recover(ctx, image_url, "Image resolution timed out")
        except Exception as e:  # noqa: BLE001
            logger.exception("Error processing image URL %s", image_url)
            return self._recover(ctx, image_url, str(e) or type(e).__name__)

        result = outcome["result"]
        if result is None:
            # FallbackStep always matches; guard against a custom pipeline
            return self._fallback(ctx.get("url") or image_url, "No resolution step matched")
        return result

    def _recover(
        self, ctx: PipelineContext, image_url: str, message: str
    ) -> ImageProcessingResult:
        """Map an unexpected failure to a result.

        With ``lenient_original`` a URL that already passed validation is
        returned as-is; probe failures are treated as a hint only.
        """
        url = ctx.get("url") or image_url
        if self.lenient_original and ctx.get("validated"):
            logger.warning("Using original URL despite processing error: %s", url)
            return ImageProcessingResult(
                processed_url=url,
                original_url=url,
                processing_method=ProcessingMethod.original,
                error=f"Processing failed but using original URL: {message}",
            )
        return self._fallback(url, message)

    async def process_avatar_image_url(
        self, image_url: str, base_origin: Optional[str] = None
    ) -> ImageProcessingResult:
        """Avatar images are usually root-relative assets of the web app."""
        return await self.process_image_url(image_url, base_origin)

    async def process_multiple_image_urls(
        self, urls: Sequence[str], base_origin: Optional[str] = None
    ) -> List[ImageProcessingResult]:
        """Resolve all URLs concurrently; output order matches input order."""
        outcomes = await asyncio.gather(
            *(self.process_image_url(url, base_origin) for url in urls),
            return_exceptions=True,
        )

        results: List[ImageProcessingResult] = []
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error("Image processing crashed for %s: %s", url, outcome)
                results.append(
                    self._fallback(url or "", str(outcome) or "Processing failed")
                )
            else:
                results.append(outcome)
        return results

    async def get_best_image_url(
        self, urls: Sequence[str], base_origin: Optional[str] = None
    ) -> ImageProcessingResult:
        """Pick the highest-priority result: original > converted > proxy > fallback."""
        if not urls:
            return self._fallback("", "No URLs provided")

        results = await self.process_multiple_image_urls(urls, base_origin)
        for method in METHOD_PRIORITY:
            for result in results:
                if result.processing_method == method and result.is_valid:
                    return result
        return results[0]
