"""Cache error types."""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache failures."""


class CacheKeyError(CacheError, ValueError):
    """Raised when an (endpoint, params) pair cannot be fingerprinted."""


class InvalidPatternError(CacheError, ValueError):
    """Raised when an invalidation pattern is not a valid regular expression."""
