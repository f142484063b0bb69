from __future__ import annotations

from typing import List, Mapping, Optional, Union

from adstudio.application.interfaces import IImageProber
from adstudio.application.pipeline.base import Middleware, Pipeline
from adstudio.application.pipeline.factory import PipelineFactory
from adstudio.application.pipeline.image.steps.empty_input import EmptyInputStep
from adstudio.application.pipeline.image.steps.normalize_url import NormalizeUrlStep
from adstudio.application.pipeline.image.steps.direct_probe import DirectProbeStep
from adstudio.application.pipeline.image.steps.amazon_rewrite import AmazonRewriteStep
from adstudio.application.pipeline.image.steps.proxy_probe import ProxyProbeStep
from adstudio.application.pipeline.image.steps.fallback import FallbackStep


def build_image_resolution_pipeline(
    prober: IImageProber,
    *,
    fallback_url: str,
    default_base_origin: str,
    proxy_base_url: str,
    proxy_params: Mapping[str, Union[str, int]],
    middlewares: Optional[List[Middleware]] = None,
) -> Pipeline:
    """Assemble the ordered resolution stages.

    Order: empty check -> normalize/validate -> direct probe -> Amazon rewrite
    -> proxy -> placeholder. The first step returning a result wins.
    """
    factory = PipelineFactory(middlewares=middlewares)
    return (
        factory.add(EmptyInputStep(fallback_url))
        .add(NormalizeUrlStep(default_base_origin))
        .add(DirectProbeStep(prober))
        .add(AmazonRewriteStep(prober))
        .add(
            ProxyProbeStep(
                prober, proxy_base_url=proxy_base_url, proxy_params=proxy_params
            )
        )
        .add(FallbackStep(fallback_url))
        .build()
    )
