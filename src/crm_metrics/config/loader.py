"""Config loader — reads YAML, applies CRM_METRICS_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from crm_metrics.config.schema import AppConfig

# env var -> (section, key)
_ENV_OVERRIDES = {
    "CRM_METRICS_API_URL": ("api", "base_url"),
    "CRM_METRICS_API_TOKEN": ("api", "token"),
    "CRM_METRICS_CACHE_MAX_SIZE": ("cache", "max_size"),
    "CRM_METRICS_CLEANUP_INTERVAL": ("cache", "cleanup_interval_s"),
    "CRM_METRICS_LOG_LEVEL": ("logging", "level"),
    "CRM_METRICS_LOG_FORMAT": ("logging", "format"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        CRM_METRICS_API_URL           -> api.base_url
        CRM_METRICS_API_TOKEN         -> api.token
        CRM_METRICS_CACHE_MAX_SIZE    -> cache.max_size
        CRM_METRICS_CLEANUP_INTERVAL  -> cache.cleanup_interval_s
        CRM_METRICS_LOG_LEVEL         -> logging.level
        CRM_METRICS_LOG_FORMAT        -> logging.format
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    # Apply env var overrides; pydantic coerces numeric strings
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
