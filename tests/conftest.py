# ABOUTME: Shared fixtures for the cache test suites
# ABOUTME: Provides a controllable clock, response factory and an opened cache in a temp directory

from pathlib import Path
from typing import Callable, Dict, Generator, Optional

import pytest

from models import CachedResponse, StoragePolicy
from urlcache import URLCache

START_TIME = 1_700_000_000.0


class FakeClock:
    """Deterministic replacement for time.time"""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_response() -> Callable[..., CachedResponse]:
    def factory(
        url: str = "https://example.com/resource",
        body: bytes = b"hello world",
        headers: Optional[Dict[str, str]] = None,
        status_code: int = 200,
        storage_policy: StoragePolicy = StoragePolicy.ALLOWED,
    ) -> CachedResponse:
        return CachedResponse(
            url=url,
            status_code=status_code,
            headers=headers if headers is not None else {"Cache-Control": "max-age=60"},
            body=body,
            storage_policy=storage_policy,
        )

    return factory


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "http-cache"


@pytest.fixture
def url_cache(cache_dir: Path, clock: FakeClock) -> Generator[URLCache, None, None]:
    """Opened cache; maintenance ticks are effectively disabled by a long interval."""
    cache = URLCache(
        cache_dir=cache_dir,
        disk_capacity_bytes=1_000_000,
        memory_capacity_bytes=100_000,
        maintenance_interval=3600,
        clock=clock,
    )
    cache.open()
    yield cache
    cache.close()
