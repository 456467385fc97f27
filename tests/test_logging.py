"""Tests for structured logging setup."""

from __future__ import annotations

import json

import structlog

from crm_metrics.cache import MetricsCache
from crm_metrics.config import CacheConfig
from crm_metrics.logging import get_logger, setup_logging


class TestSetupLogging:
    def test_json_format(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_json")
        logger.info("test message", endpoint="dashboard/overview")

        captured = capsys.readouterr()
        line = json.loads(captured.err.strip())
        assert line["event"] == "test message"
        assert line["endpoint"] == "dashboard/overview"
        assert line["level"] == "info"
        assert line["service"] == "crm-metrics"
        assert "timestamp" in line

    def test_console_format(self, capsys):
        setup_logging(level="INFO", log_format="console")
        logger = get_logger("test_console")
        logger.info("hello console", category="investors")

        captured = capsys.readouterr()
        assert "hello console" in captured.err
        assert "investors" in captured.err

    def test_log_level_filtering(self, capsys):
        setup_logging(level="WARNING", log_format="json")
        logger = get_logger("test_level")
        logger.info("should be hidden")
        logger.warning("should appear")

        captured = capsys.readouterr()
        assert "should be hidden" not in captured.err
        assert "should appear" in captured.err

    def test_get_logger_with_context(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_ctx", category="kyc", endpoint="kyc/performance")
        logger.info("context test")

        captured = capsys.readouterr()
        line = json.loads(captured.err.strip())
        assert line["category"] == "kyc"
        assert line["endpoint"] == "kyc/performance"

    def test_contextvars_binding(self, capsys):
        setup_logging(level="INFO", log_format="json")
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id="abc123")

        logger = get_logger("test_ctxvars")
        logger.info("with context var")

        captured = capsys.readouterr()
        line = json.loads(captured.err.strip())
        assert line["request_id"] == "abc123"

        structlog.contextvars.clear_contextvars()

    def test_cache_eviction_is_logged(self, capsys):
        setup_logging(level="DEBUG", log_format="json")
        cache = MetricsCache(CacheConfig(max_size=1))
        cache.set("a", {}, 1, 60)
        cache.set("b", {}, 2, 60)

        captured = capsys.readouterr()
        events = [json.loads(line) for line in captured.err.strip().splitlines()]
        evicted = [e for e in events if e["event"] == "cache_evicted"]
        assert len(evicted) == 1
        assert evicted[0]["key"] == "a"
        assert evicted[0]["logger"] == "cache"
