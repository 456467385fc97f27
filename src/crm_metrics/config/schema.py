"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class TTLConfig(BaseModel):
    """Default time-to-live per data category, in seconds."""

    dashboard_overview: float = Field(default=300, gt=0)
    realtime: float = Field(default=30, gt=0)
    investor_metrics: float = Field(default=900, gt=0)
    user_metrics: float = Field(default=900, gt=0)
    transaction_metrics: float = Field(default=600, gt=0)
    kyc_metrics: float = Field(default=600, gt=0)
    reports: float = Field(default=86400, gt=0)


class CacheConfig(BaseModel):
    max_size: int = Field(default=100, ge=1)
    cleanup_interval_s: float = Field(default=300, gt=0)
    default_category: str = "dashboard_overview"
    ttl: TTLConfig = Field(default_factory=TTLConfig)

    @model_validator(mode="after")
    def _check_default_category(self) -> CacheConfig:
        if self.default_category not in TTLConfig.model_fields:
            raise ValueError(f"Unknown default_category {self.default_category!r}")
        return self


class ApiConfig(BaseModel):
    base_url: str = "http://localhost:7000/api/metrics"
    token: str | None = None
    timeout_s: float = Field(default=10.0, gt=0)
    port: int = 8000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"


class AppConfig(BaseModel):
    cache: CacheConfig = Field(default_factory=CacheConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
