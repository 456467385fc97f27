"""Cache-aware fetch wrapper and background prefetch."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Mapping, Sequence
from typing import Any, NamedTuple

import structlog

from crm_metrics.cache.store import MISSING, MetricsCache

log = structlog.get_logger("cache.fetch")

FetchFn = Callable[[Mapping[str, Any]], Any]  # may return a value or an awaitable


class FetchResult(NamedTuple):
    payload: Any
    from_cache: bool


class PrefetchRequest(NamedTuple):
    endpoint: str
    ttl: float | None = None


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def cached_fetch(
    cache: MetricsCache,
    endpoint: str,
    params: Mapping[str, Any] | None,
    fetch_fn: FetchFn,
    ttl: float | None = None,
) -> FetchResult:
    """Return the cached payload, or call *fetch_fn(params)* and cache it.

    The TTL and the cache key are validated before *fetch_fn* runs, so a
    bad TTL or unhashable params never cost an upstream call.  Errors from
    *fetch_fn* propagate unchanged and nothing is cached.  Concurrent
    misses for the same key are not de-duplicated: each one calls
    *fetch_fn*.
    """
    params = dict(params or {})
    ttl = cache.resolve_ttl(ttl)
    cached = cache.get(endpoint, params, default=MISSING)
    if cached is not MISSING:
        return FetchResult(cached, True)

    payload = await _call(fetch_fn, params)
    cache.set(endpoint, params, payload, ttl)
    return FetchResult(payload, False)


async def prefetch(
    cache: MetricsCache,
    requests: Sequence[PrefetchRequest],
    params: Mapping[str, Any] | None,
    fetch_fn: Callable[[str, Mapping[str, Any]], Any],
) -> list[str]:
    """Warm the cache for every endpoint in *requests* not already cached.

    Fetches run concurrently.  Requests with an invalid TTL or key are
    skipped before fetching; fetch failures are logged and skipped.
    Returns the endpoints that were fetched and stored.
    """
    params = dict(params or {})
    pending: list[tuple[str, float]] = []
    for req in requests:
        try:
            ttl = cache.resolve_ttl(req.ttl)
            if cache.has(req.endpoint, params):
                continue
        except ValueError as exc:
            log.warning("prefetch_skipped", endpoint=req.endpoint, error=str(exc))
            continue
        pending.append((req.endpoint, ttl))
    if not pending:
        return []

    results = await asyncio.gather(
        *(_call(fetch_fn, endpoint, params) for endpoint, _ in pending),
        return_exceptions=True,
    )

    fetched: list[str] = []
    for (endpoint, ttl), result in zip(pending, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            log.warning("prefetch_failed", endpoint=endpoint, error=str(result))
            continue
        cache.set(endpoint, params, result, ttl)
        fetched.append(endpoint)
    log.debug("prefetch_done", requested=len(pending), fetched=len(fetched))
    return fetched
