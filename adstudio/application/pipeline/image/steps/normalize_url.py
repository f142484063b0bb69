from __future__ import annotations

import logging
from typing import Optional

from adstudio.application.pipeline.base import BaseStep, PipelineContext
from adstudio.core.exceptions import InvalidImageUrlError
from adstudio.core.pyd_schemas import ImageProcessingResult
from adstudio.utils.url_utils import is_valid_http_url, to_absolute_url

logger = logging.getLogger(__name__)


class NormalizeUrlStep(BaseStep[ImageProcessingResult]):
    """Trim, absolutize root-relative paths and validate the URL.

    Sets artifacts ``url`` (absolute candidate) and ``validated``. Raises
    InvalidImageUrlError for anything that is not an absolute http(s) URL.
    """

    name = "normalize_url"

    def __init__(self, default_base_origin: str) -> None:
        self.default_base_origin = default_base_origin

    async def run(self, context: PipelineContext) -> Optional[ImageProcessingResult]:
        url = str(context.input.get("url") or "").strip()
        context.set("url", url)

        if url.startswith("/"):
            base_origin = context.input.get("base_origin") or self.default_base_origin
            url = to_absolute_url(url, base_origin)
            context.set("url", url)
            logger.info("Converting relative URL to absolute: %s", url)

        if not is_valid_http_url(url):
            raise InvalidImageUrlError(url=url)

        context.set("validated", True)
        return None
