"""FastAPI application exposing cache health, statistics and invalidation."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from crm_metrics import __version__
from crm_metrics.cache import (
    InvalidPatternError,
    MetricsCache,
    invalidate_category,
)
from crm_metrics.config.loader import load_config
from crm_metrics.config.schema import AppConfig

logger = structlog.get_logger("api")


class InvalidateRequest(BaseModel):
    pattern: str


def get_cache(request: Request) -> MetricsCache:
    """Dependency returning the app-owned cache."""
    return request.app.state.cache


def create_app(config: AppConfig | None = None, cache: MetricsCache | None = None) -> FastAPI:
    """Build the admin app.  The cache is created on startup and disposed on shutdown."""
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.cache = cache or MetricsCache.from_config(config.cache)
        app.state.cache.start()
        logger.info("Metrics cache started", max_size=config.cache.max_size)
        try:
            yield
        finally:
            app.state.cache.dispose()
            logger.info("Metrics cache disposed")

    app = FastAPI(
        title="CRM Metrics Cache API",
        description="Health, statistics and invalidation for the metrics response cache",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/cache/stats")
    async def cache_stats(cache: MetricsCache = Depends(get_cache)):
        stats = cache.get_stats()
        return {
            "size": stats.size,
            "maxSize": stats.max_size,
            "expiredCount": stats.expired_count,
            "totalHits": stats.total_hits,
            "hitRate": round(stats.hit_rate_estimate, 2),
        }

    @app.delete("/api/cache/{category}")
    async def invalidate(category: str, cache: MetricsCache = Depends(get_cache)):
        """Drop every cached response for a category ("all" clears everything)."""
        try:
            removed = invalidate_category(cache, category)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Unknown cache category {category!r}")
        logger.info("Cache category invalidated", category=category, removed=removed)
        return {"category": category, "removed": removed}

    @app.post("/api/cache/invalidate")
    async def invalidate_pattern(req: InvalidateRequest, cache: MetricsCache = Depends(get_cache)):
        try:
            removed = cache.invalidate_by_pattern(req.pattern)
        except InvalidPatternError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        logger.info("Cache pattern invalidated", pattern=req.pattern, removed=removed)
        return {"pattern": req.pattern, "removed": removed}

    @app.post("/api/cache/sweep")
    async def sweep(cache: MetricsCache = Depends(get_cache)):
        """Run the expiry sweep now instead of waiting for the next interval."""
        return {"removed": cache.clear_expired()}

    return app
