"""
Shared test configuration and fixtures.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from adstudio.core.config import settings

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def pytest_configure(config):  # pylint: disable=unused-argument
    """Keep tests off the filesystem and quiet noisy libraries."""
    settings.log_file = ""
    logging.getLogger("adstudio").setLevel(logging.DEBUG)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


@pytest.fixture(autouse=True)
def log_test_name(request):
    """Log test name when test starts and finishes."""
    logger = logging.getLogger(request.node.nodeid)
    logger.info("Starting test: %s", request.node.name)
    start_time = datetime.now()

    def log_test_end():
        duration = (datetime.now() - start_time).total_seconds()
        logger.info("Finished test in %.2fs", duration)

    request.addfinalizer(log_test_end)


class FakeProber:
    """IImageProber double answering from a URL -> bool table.

    Unknown URLs are reported as unreachable. ``probe`` is an AsyncMock so
    tests can assert on calls.
    """

    def __init__(self, reachable: Optional[Dict[str, bool]] = None, default: bool = False):
        self.reachable = dict(reachable or {})
        self.default = default
        self.probe = AsyncMock(side_effect=self._probe)

    async def _probe(self, url: str) -> bool:
        return self.reachable.get(url, self.default)

    @property
    def probed_urls(self) -> List[str]:
        return [c.args[0] for c in self.probe.await_args_list]


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_prober():
    return FakeProber()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_prober():
    """Factory for FakeProber instances with a reachability table."""
    return FakeProber
