from fastapi import FastAPI
from fastapi.testclient import TestClient

from adstudio.core.middleware import RateLimitMiddleware


def _limited(fake_clock, calls=2, period=60):
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/api/v1/health")
    async def health():
        return {"status": "healthy"}

    middleware = RateLimitMiddleware(app, calls=calls, period=period, clock=fake_clock.now)
    return middleware, TestClient(middleware)


def test_requests_over_limit_get_429_with_retry_after(fake_clock):
    _, client = _limited(fake_clock)

    assert client.get("/ping").status_code == 200
    fake_clock.advance(10)
    assert client.get("/ping").status_code == 200

    blocked = client.get("/ping")
    assert blocked.status_code == 429
    assert blocked.headers["Retry-After"] == "50"
    assert blocked.json()["detail"]["error"] == "Rate limit exceeded"


def test_window_slides(fake_clock):
    _, client = _limited(fake_clock)
    client.get("/ping")
    client.get("/ping")
    assert client.get("/ping").status_code == 429

    fake_clock.advance(61)
    assert client.get("/ping").status_code == 200


def test_unlimited_paths_are_not_counted(fake_clock):
    _, client = _limited(fake_clock, calls=1)

    for _ in range(3):
        assert client.get("/api/v1/health").status_code == 200
    assert client.get("/ping").status_code == 200


def test_idle_clients_are_swept(fake_clock):
    middleware, client = _limited(fake_clock)
    for i in range(50):
        middleware._retry_after(f"10.0.0.{i}", fake_clock.now())
    assert middleware.tracked_clients == 50

    fake_clock.advance(30)
    client.get("/ping")
    # Sweep runs at most once per period
    assert middleware.tracked_clients == 51

    fake_clock.advance(31)
    client.get("/ping")
    assert middleware.tracked_clients == 1
