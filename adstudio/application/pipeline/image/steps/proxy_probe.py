from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

from adstudio.application.interfaces import IImageProber
from adstudio.application.pipeline.base import BaseStep, PipelineContext
from adstudio.core.pyd_schemas import ImageProcessingResult, ProcessingMethod
from adstudio.utils.url_utils import build_proxy_url

logger = logging.getLogger(__name__)


class ProxyProbeStep(BaseStep[ImageProcessingResult]):
    """Last network attempt: fetch the image through the resizing proxy."""

    name = "proxy_probe"
    required_keys = ["url", "validated"]

    def __init__(
        self,
        prober: IImageProber,
        *,
        proxy_base_url: str,
        proxy_params: Mapping[str, Union[str, int]],
    ) -> None:
        self.prober = prober
        self.proxy_base_url = proxy_base_url
        self.proxy_params = dict(proxy_params)

    async def run(self, context: PipelineContext) -> Optional[ImageProcessingResult]:
        url: str = context.get("url")
        proxy_url = build_proxy_url(url, self.proxy_base_url, self.proxy_params)
        context.set("proxy_url", proxy_url)
        if await self.prober.probe(proxy_url):
            logger.info("Proxy image URL is accessible: %s", proxy_url)
            return ImageProcessingResult(
                processed_url=proxy_url,
                original_url=url,
                processing_method=ProcessingMethod.proxy,
            )
        return None
