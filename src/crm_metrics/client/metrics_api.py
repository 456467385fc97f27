"""Metrics REST API client — every read goes through the response cache."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from crm_metrics.cache import FetchResult, MetricsCache, PrefetchRequest, cached_fetch, prefetch

log = structlog.get_logger("client.metrics")

REPORT_KINDS = ("financial", "operational", "compliance", "performance")


class MetricsApiError(Exception):
    """Non-2xx response from the metrics API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    return f"HTTP {resp.status_code}"


def _query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Drop unset values; lists are sent as repeated query params by httpx."""
    return {k: v for k, v in params.items() if v is not None}


class MetricsApiClient:
    """Async client for the platform's ``/api/metrics`` endpoints."""

    def __init__(
        self,
        cache: MetricsCache,
        base_url: str = "http://localhost:7000/api/metrics",
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    # --- transport ---

    async def request(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET ``{base_url}/{endpoint}`` and return the decoded JSON body."""
        http = await self._get_http()
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        resp = await http.get(url, params=_query_params(params or {}), headers=self._headers())
        log.debug("metrics_request", endpoint=endpoint, status=resp.status_code)
        if not resp.is_success:
            raise MetricsApiError(resp.status_code, _error_message(resp))
        return resp.json()

    async def _cached(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None,
        category: str,
    ) -> FetchResult:
        # Key on the query actually sent, so unset filters share one entry
        return await cached_fetch(
            self.cache,
            endpoint,
            _query_params(params or {}),
            lambda p: self.request(endpoint, p),
            self.cache.ttl_for(category),
        )

    # --- dashboard ---

    async def dashboard_overview(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("dashboard/overview", params, "dashboard_overview")

    async def realtime_metrics(self) -> FetchResult:
        return await self._cached("dashboard/realtime", None, "realtime")

    async def prefetch_dashboard(self, params: Mapping[str, Any] | None = None) -> list[str]:
        """Warm the overview and realtime dashboard cards."""
        return await prefetch(
            self.cache,
            [
                PrefetchRequest("dashboard/overview", self.cache.ttl_for("dashboard_overview")),
                PrefetchRequest("dashboard/realtime", self.cache.ttl_for("realtime")),
            ],
            _query_params(params or {}),
            self.request,
        )

    # --- investors ---

    async def investor_metrics(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("investors", params, "investor_metrics")

    async def investor_details(
        self, investor_id: str, params: Mapping[str, Any] | None = None
    ) -> FetchResult:
        return await self._cached(f"investors/{investor_id}", params, "investor_metrics")

    async def investor_performance(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("investors/performance", params, "investor_metrics")

    # --- users ---

    async def user_metrics(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("users", params, "user_metrics")

    async def user_details(self, user_id: str, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached(f"users/{user_id}", params, "user_metrics")

    async def user_journey(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("users/journey", params, "user_metrics")

    # --- transactions ---

    async def transaction_metrics(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("transactions", params, "transaction_metrics")

    async def transaction_details(
        self, transaction_id: str, params: Mapping[str, Any] | None = None
    ) -> FetchResult:
        return await self._cached(f"transactions/{transaction_id}", params, "transaction_metrics")

    async def repayment_metrics(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("transactions/repayments", params, "transaction_metrics")

    # --- kyc ---

    async def kyc_metrics(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("kyc", params, "kyc_metrics")

    async def kyc_performance(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        return await self._cached("kyc/performance", params, "kyc_metrics")

    # --- reports ---

    async def report(self, kind: str, params: Mapping[str, Any] | None = None) -> FetchResult:
        """Fetch a financial / operational / compliance / performance report."""
        if kind not in REPORT_KINDS:
            raise ValueError(f"Unknown report kind {kind!r}, expected one of {REPORT_KINDS}")
        return await self._cached(f"reports/{kind}", params, "reports")

    async def report_list(self) -> FetchResult:
        return await self._cached("reports", None, "reports")
