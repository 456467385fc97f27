"""CRM metrics data layer — response cache, metrics API client, admin API."""

__version__ = "0.1.0"
