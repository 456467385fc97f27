"""Configuration system."""

from crm_metrics.config.loader import load_config
from crm_metrics.config.schema import ApiConfig, AppConfig, CacheConfig, TTLConfig

__all__ = ["ApiConfig", "AppConfig", "CacheConfig", "TTLConfig", "load_config"]
