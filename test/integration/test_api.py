"""HTTP API tests with adapters replaced through dependency overrides."""

from unittest.mock import AsyncMock

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from adstudio.application.use_cases.image_resolve import ImageResolver
from adstudio.application.use_cases.product_fetch import ProductService
from adstudio.core.exceptions import ConfigurationError, ImageFetchError
from adstudio.core.pyd_schemas import AmazonProduct, InlineImage
from adstudio.presentation.api.v1.dependencies.services import (
    get_image_inliner,
    get_image_resolver,
    get_product_cache,
    get_product_service,
)
from adstudio.presentation.main import create_application

PLACEHOLDER = "https://placeholder.test/p.png"
GOOD = "https://good.test/real.jpg"
PRODUCT_URL = "https://www.amazon.com/dp/B0TEST"


@pytest.fixture
def scraper():
    mock = AsyncMock()
    mock.scrape.return_value = [
        AmazonProduct(title="Desk Lamp", asin="B0TEST", in_stock=True)
    ]
    return mock


@pytest.fixture
def inliner():
    mock = AsyncMock()
    mock.inline.return_value = InlineImage(base64="aGVsbG8=", mime_type="image/png")
    return mock


@pytest.fixture
def client(make_prober, scraper, inliner):
    app = create_application()
    prober = make_prober({GOOD: True})

    def _resolver():
        return ImageResolver(
            prober,
            fallback_url=PLACEHOLDER,
            proxy_base_url="https://proxy.test/",
            proxy_params={},
        )

    def _service(cache=Depends(get_product_cache)):
        return ProductService(scraper, cache)

    app.dependency_overrides[get_image_resolver] = _resolver
    app.dependency_overrides[get_product_service] = _service
    app.dependency_overrides[get_image_inliner] = lambda: inliner

    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.integration
def test_root_and_health(client):
    assert client.get("/api/v1/").json()["status"] == "healthy"

    response = client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] in {"healthy", "warning", "unhealthy"}
    assert body["cache"]["total_entries"] == 0


@pytest.mark.integration
def test_resolve_single_image(client):
    response = client.post("/api/v1/images/resolve", json={"url": GOOD})

    assert response.status_code == 200
    body = response.json()
    assert body["processing_method"] == "original"
    assert body["processed_url"] == GOOD
    assert body["is_valid"] is True


@pytest.mark.integration
def test_resolve_malformed_image_is_still_200(client):
    response = client.post("/api/v1/images/resolve", json={"url": "not a url"})

    assert response.status_code == 200
    body = response.json()
    assert body["processing_method"] == "fallback"
    assert body["processed_url"] == PLACEHOLDER
    assert body["error"] == "Invalid URL format"


@pytest.mark.integration
def test_resolve_batch_preserves_order(client):
    urls = ["", GOOD, "https://gone.test/a.jpg"]
    response = client.post("/api/v1/images/resolve-batch", json={"urls": urls})

    assert response.status_code == 200
    methods = [r["processing_method"] for r in response.json()]
    assert methods == ["fallback", "original", "fallback"]


@pytest.mark.integration
def test_resolve_batch_rejects_oversized_lists(client):
    response = client.post(
        "/api/v1/images/resolve-batch",
        json={"urls": [f"https://x.test/{i}.jpg" for i in range(51)]},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "Validation error"


@pytest.mark.integration
def test_best_image(client):
    response = client.post(
        "/api/v1/images/best",
        json={"urls": ["", "https://bad.invalid.test/x.png", GOOD]},
    )

    assert response.status_code == 200
    assert response.json()["processed_url"] == GOOD

    empty = client.post("/api/v1/images/best", json={"urls": []}).json()
    assert empty["error"] == "No URLs provided"
    assert empty["original_url"] == ""


@pytest.mark.integration
def test_inline_image(client, inliner):
    response = client.post("/api/v1/images/inline", json={"url": GOOD})

    assert response.status_code == 200
    assert response.json() == {"base64": "aGVsbG8=", "mime_type": "image/png"}
    inliner.inline.assert_awaited_once_with(GOOD)


@pytest.mark.integration
def test_inline_fetch_failure_maps_to_502(client, inliner):
    inliner.inline.side_effect = ImageFetchError("Failed to fetch image: 404", url=GOOD, status=404)

    response = client.post("/api/v1/images/inline", json={"url": GOOD})

    assert response.status_code == 502
    assert response.json()["detail"]["error_code"] == "IMAGE_FETCH_ERROR"


@pytest.mark.integration
def test_scrape_then_cached(client, scraper):
    first = client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL, "max_items": 1})
    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["cached"] is False
    assert body["data"][0]["inStock"] is True

    second = client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL})
    assert second.json()["cached"] is True
    assert scraper.scrape.await_count == 1

    stats = client.get("/api/v1/products/cache/stats").json()
    assert stats["totalEntries"] == 1


@pytest.mark.integration
def test_scrape_force_refresh(client, scraper):
    client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL})
    client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL, "force_refresh": True})
    assert scraper.scrape.await_count == 2


@pytest.mark.integration
def test_scrape_not_found_is_404(client, scraper):
    scraper.scrape.return_value = []

    response = client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL})

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["errorCode"] == "PRODUCT_NOT_FOUND"


@pytest.mark.integration
def test_scrape_without_token_is_503(client, scraper):
    scraper.scrape.side_effect = ConfigurationError("Apify token is not configured.")

    response = client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL})

    assert response.status_code == 503
    assert response.json()["errorCode"] == "CONFIGURATION_ERROR"


@pytest.mark.integration
def test_scrape_rejects_invalid_url(client, scraper):
    response = client.post("/api/v1/products/scrape", json={"url": "not a url"})

    assert response.status_code == 422
    scraper.scrape.assert_not_awaited()


@pytest.mark.integration
def test_cache_management_endpoints(client):
    client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL})
    client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL + "2"})

    removed = client.delete("/api/v1/products/cache/entry", params={"url": PRODUCT_URL})
    assert removed.json() == {"removed": True}
    again = client.delete("/api/v1/products/cache/entry", params={"url": PRODUCT_URL})
    assert again.json() == {"removed": False}

    assert client.post("/api/v1/products/cache/cleanup").json() == {"cleared": 0}
    assert client.delete("/api/v1/products/cache").json() == {"cleared": 1}
    assert client.get("/api/v1/products/cache/stats").json()["totalEntries"] == 0


@pytest.mark.integration
def test_scrape_unsupported_marketplace_is_400(client, scraper):
    response = client.post("/api/v1/products/scrape", json={"url": "https://www.ebay.com/itm/1"})

    assert response.status_code == 400
    assert response.json()["errorCode"] == "UNSUPPORTED_URL"
    scraper.scrape.assert_not_awaited()


@pytest.mark.integration
def test_preload_products(client, scraper):
    client.post("/api/v1/products/scrape", json={"url": PRODUCT_URL})

    response = client.post(
        "/api/v1/products/preload",
        json={"urls": [PRODUCT_URL, PRODUCT_URL + "2", "https://www.ebay.com/itm/1"]},
    )

    assert response.status_code == 200
    assert response.json() == {"requested": 3, "fetched": 1}
    assert scraper.scrape.await_count == 2
    assert client.get("/api/v1/products/cache/stats").json()["totalEntries"] == 2


@pytest.mark.integration
def test_product_image_prefers_reachable_candidate(client):
    response = client.post(
        "/api/v1/products/image",
        json={
            "product": {
                "title": "Desk Lamp",
                "highResolutionImages": ["https://gone.test/hi.jpg"],
                "thumbnailImage": GOOD,
            }
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["processing_method"] == "original"
    assert body["processed_url"] == GOOD
