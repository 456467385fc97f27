"""Metrics response cache — store, key derivation, fetch wrapper, invalidation."""

from crm_metrics.cache.errors import CacheError, CacheKeyError, InvalidPatternError
from crm_metrics.cache.fetch import FetchResult, PrefetchRequest, cached_fetch, prefetch
from crm_metrics.cache.invalidation import (
    CATEGORY_PATTERNS,
    invalidate_all,
    invalidate_category,
)
from crm_metrics.cache.keys import derive_key
from crm_metrics.cache.store import MISSING, CacheEntry, CacheStats, MetricsCache

__all__ = [
    "CATEGORY_PATTERNS",
    "CacheEntry",
    "CacheError",
    "CacheKeyError",
    "CacheStats",
    "FetchResult",
    "InvalidPatternError",
    "MISSING",
    "MetricsCache",
    "PrefetchRequest",
    "cached_fetch",
    "derive_key",
    "invalidate_all",
    "invalidate_category",
    "prefetch",
]
