"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from crm_metrics.config import AppConfig, CacheConfig, load_config

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "config.yaml.example"


class TestAppConfig:
    def test_defaults(self):
        cfg = AppConfig()
        assert cfg.cache.max_size == 100
        assert cfg.cache.cleanup_interval_s == 300
        assert cfg.cache.default_category == "dashboard_overview"
        assert cfg.cache.ttl.realtime == 30
        assert cfg.cache.ttl.reports == 86400
        assert cfg.api.base_url == "http://localhost:7000/api/metrics"
        assert cfg.api.token is None
        assert cfg.logging.level == "INFO"
        assert cfg.logging.format == "json"

    def test_rejects_zero_max_size(self):
        with pytest.raises(ValidationError):
            CacheConfig(max_size=0)

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValidationError):
            CacheConfig(ttl={"realtime": 0})

    def test_rejects_unknown_default_category(self):
        with pytest.raises(ValidationError):
            CacheConfig(default_category="forever")


class TestLoadConfig:
    def test_load_example_config(self):
        cfg = load_config(EXAMPLE_CONFIG)
        assert cfg.cache.max_size == 100
        assert cfg.cache.ttl.investor_metrics == 900
        assert cfg.api.port == 8000

    def test_load_nonexistent_file_returns_defaults(self):
        cfg = load_config("/tmp/nonexistent_config_12345.yaml")
        assert cfg.cache.max_size == 100

    def test_load_none_returns_defaults(self):
        cfg = load_config(None)
        assert cfg.api.base_url == "http://localhost:7000/api/metrics"

    def test_env_override_api(self, monkeypatch):
        monkeypatch.setenv("CRM_METRICS_API_URL", "https://crm.example.com/api/metrics")
        monkeypatch.setenv("CRM_METRICS_API_TOKEN", "secret")
        cfg = load_config(None)
        assert cfg.api.base_url == "https://crm.example.com/api/metrics"
        assert cfg.api.token == "secret"

    def test_env_override_cache_numbers(self, monkeypatch):
        monkeypatch.setenv("CRM_METRICS_CACHE_MAX_SIZE", "250")
        monkeypatch.setenv("CRM_METRICS_CLEANUP_INTERVAL", "60")
        cfg = load_config(None)
        assert cfg.cache.max_size == 250
        assert cfg.cache.cleanup_interval_s == 60

    def test_env_override_logging(self, monkeypatch):
        monkeypatch.setenv("CRM_METRICS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CRM_METRICS_LOG_FORMAT", "console")
        cfg = load_config(None)
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.format == "console"

    def test_env_overrides_yaml_values(self, monkeypatch):
        monkeypatch.setenv("CRM_METRICS_CACHE_MAX_SIZE", "10")
        cfg = load_config(EXAMPLE_CONFIG)
        assert cfg.cache.max_size == 10
        # Non-overridden values preserved
        assert cfg.cache.ttl.kyc_metrics == 600

    def test_load_minimal_yaml(self, tmp_path):
        p = tmp_path / "minimal.yaml"
        p.write_text("cache:\n  ttl:\n    realtime: 5\n")
        cfg = load_config(p)
        assert cfg.cache.ttl.realtime == 5
        # Defaults still apply for unspecified sections
        assert cfg.cache.ttl.reports == 86400
        assert cfg.cache.max_size == 100

    def test_invalid_env_value_fails(self, monkeypatch):
        monkeypatch.setenv("CRM_METRICS_CACHE_MAX_SIZE", "lots")
        with pytest.raises(ValidationError):
            load_config(None)
