"""In-memory TTL cache for metrics API responses."""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from crm_metrics.cache.errors import InvalidPatternError
from crm_metrics.cache.keys import derive_key
from crm_metrics.config.schema import CacheConfig, TTLConfig

log = structlog.get_logger("cache")

Clock = Callable[[], float]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass
class CacheEntry:
    """One cached payload with its own TTL and read counter."""

    payload: Any
    created_at: float
    ttl: float
    hit_count: int = 0

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl

    def hit(self) -> None:
        self.hit_count += 1


@dataclass(frozen=True)
class CacheStats:
    size: int
    max_size: int
    expired_count: int
    total_hits: int
    hit_rate_estimate: float


class MetricsCache:
    """Dict + monotonic clock TTL cache with least-hit eviction.

    Not thread-safe: every operation runs to completion without awaiting, so
    the cache is safe to share between tasks on a single event loop only.

    Eviction removes the entry with the lowest ``hit_count`` (least
    frequently read, not least recently read).  Ties go to the entry that
    was inserted first; callers should treat that order as unspecified.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self._config = config or CacheConfig()
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._sweep_task: asyncio.Task | None = None

    @classmethod
    def from_config(cls, config: CacheConfig, *, clock: Clock = time.monotonic) -> MetricsCache:
        return cls(config, clock=clock)

    @property
    def max_size(self) -> int:
        return self._config.max_size

    @property
    def cleanup_interval(self) -> float:
        return self._config.cleanup_interval_s

    def __len__(self) -> int:
        return len(self._store)

    def keys(self) -> list[str]:
        return list(self._store)

    def ttl_for(self, category: str) -> float:
        """Default TTL (seconds) configured for a data category."""
        if category not in TTLConfig.model_fields:
            raise ValueError(f"Unknown TTL category: {category!r}")
        return getattr(self._config.ttl, category)

    # --- read / write ---

    def get(self, endpoint: str, params: Mapping[str, Any] | None = None, default: Any = None) -> Any:
        """Return the cached payload, or *default* if missing / expired.

        Pass ``default=MISSING`` to tell a cached ``None`` apart from a miss.
        """
        key = derive_key(endpoint, params)
        entry = self._store.get(key)
        if entry is None:
            return default
        if entry.is_expired(self._clock()):
            del self._store[key]
            return default
        entry.hit()
        return entry.payload

    def has(self, endpoint: str, params: Mapping[str, Any] | None = None) -> bool:
        """True if a live entry exists.  Does not count as a hit."""
        entry = self._store.get(derive_key(endpoint, params))
        return entry is not None and not entry.is_expired(self._clock())

    def set(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None,
        payload: Any,
        ttl: float | None = None,
    ) -> None:
        """Store *payload* with a fresh entry (hit count reset to zero).

        Only a new key can trigger eviction: overwriting a key that is
        already stored never evicts, even when the store is full.
        """
        ttl = self.resolve_ttl(ttl)
        key = derive_key(endpoint, params)
        if key not in self._store and len(self._store) >= self._config.max_size:
            self.evict_one()
        self._store[key] = CacheEntry(payload=payload, created_at=self._clock(), ttl=ttl)

    def resolve_ttl(self, ttl: float | None) -> float:
        """Return *ttl*, or the default-category TTL when it is None.

        Raises ValueError for a non-positive TTL.
        """
        if ttl is None:
            ttl = self.ttl_for(self._config.default_category)
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        return float(ttl)

    def delete(self, endpoint: str, params: Mapping[str, Any] | None = None) -> bool:
        """Remove a single entry (no-op if absent).  Returns whether it existed."""
        return self._store.pop(derive_key(endpoint, params), None) is not None

    def clear(self) -> None:
        """Drop all entries."""
        self._store.clear()

    # --- maintenance ---

    def clear_expired(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.is_expired(now)]
        for key in expired:
            del self._store[key]
        return len(expired)

    def evict_one(self) -> str | None:
        """Evict the entry with the lowest hit count.  O(n) scan."""
        if not self._store:
            return None
        victim = min(self._store, key=lambda k: self._store[k].hit_count)
        entry = self._store.pop(victim)
        log.debug("cache_evicted", key=victim, hit_count=entry.hit_count)
        return victim

    def invalidate_by_pattern(self, pattern: str | re.Pattern[str]) -> int:
        """Remove every entry whose key matches *pattern* (``re.search``)."""
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as exc:
                raise InvalidPatternError(f"Invalid cache pattern {pattern!r}: {exc}") from exc

        matched = [key for key in self._store if pattern.search(key)]
        for key in matched:
            del self._store[key]
        if matched:
            log.debug("cache_invalidated", pattern=pattern.pattern, removed=len(matched))
        return len(matched)

    def get_stats(self) -> CacheStats:
        now = self._clock()
        expired = sum(1 for entry in self._store.values() if entry.is_expired(now))
        total_hits = sum(entry.hit_count for entry in self._store.values())
        hit_rate = total_hits / (total_hits + expired) * 100 if total_hits > 0 else 0.0
        return CacheStats(
            size=len(self._store),
            max_size=self._config.max_size,
            expired_count=expired,
            total_hits=total_hits,
            hit_rate_estimate=hit_rate,
        )

    # --- lifecycle ---

    @property
    def sweep_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """Start the background expiry sweep on the running event loop.

        Calling ``start()`` again replaces the existing sweep task.
        """
        self.stop()
        loop = asyncio.get_running_loop()
        self._sweep_task = loop.create_task(self._sweep_loop(), name="metrics-cache-sweep")
        log.info("cache_sweep_started", interval_s=self._config.cleanup_interval_s)

    def stop(self) -> None:
        """Cancel the sweep task.  Safe to call repeatedly."""
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        self._sweep_task = None
        log.info("cache_sweep_stopped")

    def dispose(self) -> None:
        self.stop()
        self.clear()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._config.cleanup_interval_s)
            try:
                removed = self.clear_expired()
            except Exception:
                log.exception("cache_sweep_error")
                continue
            if removed:
                log.debug("cache_sweep", removed=removed, size=len(self._store))
