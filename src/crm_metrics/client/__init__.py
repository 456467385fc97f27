"""Metrics REST API client."""

from crm_metrics.client.metrics_api import REPORT_KINDS, MetricsApiClient, MetricsApiError

__all__ = ["MetricsApiClient", "MetricsApiError", "REPORT_KINDS"]
