"""Structured logging."""

from crm_metrics.logging.setup import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
