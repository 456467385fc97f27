"""Shared test fixtures."""

import pytest

from crm_metrics.cache import MetricsCache
from crm_metrics.config import CacheConfig


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_cache(clock):
    """Factory for caches driven by the fake clock."""

    def _make(**overrides) -> MetricsCache:
        return MetricsCache(CacheConfig(**overrides), clock=clock)

    return _make


@pytest.fixture
def cache(make_cache):
    return make_cache()
