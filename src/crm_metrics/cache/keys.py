"""Cache key fingerprinting for (endpoint, params) pairs."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from crm_metrics.cache.errors import CacheKeyError

# Characters that delimit the query part of a key
_NAME_DELIMITERS = ("=", "&", "?")


def _encode_value(name: str, value: Any) -> str:
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise CacheKeyError(f"Parameter {name!r} is not JSON-serializable: {exc}") from exc


def _check_name(name: Any) -> None:
    if not isinstance(name, str):
        raise CacheKeyError(f"Parameter names must be strings, got {name!r}")
    if any(d in name for d in _NAME_DELIMITERS):
        raise CacheKeyError(f"Parameter name {name!r} contains a reserved character (=, & or ?)")


def derive_key(endpoint: str, params: Mapping[str, Any] | None = None) -> str:
    """Build a canonical cache key: ``endpoint?a=<json>&b=<json>``.

    Parameter names are sorted so that the key does not depend on the order
    they were supplied in.  Every value is JSON-encoded (nested mappings with
    sorted keys), so ``1`` and ``"1"`` produce different keys.  An empty or
    missing *params* yields the bare endpoint.

    Endpoints may not contain ``?`` and names may not contain ``=``, ``&`` or
    ``?``; either would let two different requests share a key.
    """
    if not isinstance(endpoint, str):
        raise CacheKeyError(f"Endpoint must be a string, got {type(endpoint).__name__}")
    if "?" in endpoint:
        raise CacheKeyError(f"Endpoint {endpoint!r} must not contain '?'; pass query values as params")
    if not params:
        return endpoint

    names = list(params)
    for name in names:
        _check_name(name)

    query = "&".join(f"{name}={_encode_value(name, params[name])}" for name in sorted(names))
    return f"{endpoint}?{query}"
