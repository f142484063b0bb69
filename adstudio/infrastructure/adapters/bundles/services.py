from __future__ import annotations

from types import SimpleNamespace

from adstudio.application.interfaces.service_adapters import IServiceAdapters
from adstudio.infrastructure.adapters import (
    ApifyProductScraper,
    HttpImageInliner,
    HttpImageProber,
)


def get_adapter_bundle() -> IServiceAdapters:
    """Provide the concrete adapters used by the API use cases.

    The response cache is not part of the bundle: it is application-scoped
    state created in the FastAPI lifespan.
    """
    return SimpleNamespace(
        prober=HttpImageProber(),
        scraper=ApifyProductScraper(),
        inliner=HttpImageInliner(),
    )
