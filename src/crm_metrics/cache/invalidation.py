"""Category-level cache invalidation helpers."""

from __future__ import annotations

import re

from crm_metrics.cache.store import MetricsCache

# Category -> key substrings whose entries it owns
CATEGORY_PATTERNS: dict[str, tuple[str, ...]] = {
    "dashboard": ("dashboard/overview", "dashboard/realtime"),
    "investors": ("investors",),
    "users": ("users",),
    "transactions": ("transactions",),
    "kyc": ("kyc",),
}

ALL = "all"


def invalidate_category(cache: MetricsCache, category: str) -> int:
    """Drop every entry belonging to *category*; ``"all"`` clears the cache.

    Returns the number of entries removed.
    """
    if category == ALL:
        return invalidate_all(cache)
    try:
        substrings = CATEGORY_PATTERNS[category]
    except KeyError:
        raise ValueError(f"Unknown cache category: {category!r}") from None
    return sum(cache.invalidate_by_pattern(re.escape(s)) for s in substrings)


def invalidate_all(cache: MetricsCache) -> int:
    removed = len(cache)
    cache.clear()
    return removed
