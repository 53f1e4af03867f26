"""
HTTP adapter for the remote market-data API.

Implements MarketDataPort on top of ``httpx.AsyncClient``. Every call
unwraps the ``{success, data, message}`` envelope, validates the payload
and returns a domain entity. Failures are raised as one of three
MarketDataError subclasses, each carrying a human-readable message:

- ApiTransportError: the server could not be reached or timed out.
- ApiResponseError: HTTP error status, or ``success`` false / no data.
- MalformedPayloadError: body is not JSON or does not match the schema.

The client enforces its own request timeout and never retries.
"""

import logging
from functools import lru_cache
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from marketpulse.core.config import Settings
from marketpulse.domain.market.entities import (
    EconomicDataPoint,
    EconomicIndicator,
    MarketOverview,
    MetricPoint,
    NewsItem,
    Page,
    StockSummary,
    StockTimeSeries,
    TopPerformer,
)
from marketpulse.domain.market.errors import (
    ApiResponseError,
    ApiTransportError,
    MalformedPayloadError,
)
from marketpulse.domain.market.ports import MarketDataPort
from marketpulse.infrastructure.market.payloads import (
    ApiEnvelope,
    EconomicDataPointPayload,
    EconomicIndicatorPayload,
    MarketOverviewPayload,
    MetricPointPayload,
    NewsItemPayload,
    PagePayload,
    StockSummaryPayload,
    StockTimeSeriesPayload,
    TopPerformerPayload,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
TIMEOUT_MESSAGE = "Request timed out. Please try again."
NO_RESPONSE_MESSAGE = "No response from server. Please check your network connection."


@lru_cache(maxsize=None)
def _adapter(payload_type: Any) -> TypeAdapter:
    return TypeAdapter(payload_type)


def _error_message(body: Any) -> Optional[str]:
    """Pick the most specific message from an error body."""
    if not isinstance(body, dict):
        return None
    for field_name in ("message", "error"):
        value = body.get(field_name)
        if isinstance(value, str) and value:
            return value
    return None


def _segment(value: str) -> str:
    return quote(value, safe="")


class MarketApiClient(MarketDataPort):
    """Async client for the market-data REST API.

    Usage:
        client = MarketApiClient("http://localhost:8080")
        overview = await client.get_market_overview()
        await client.aclose()

    Args:
        base_url: Scheme and host of the API, without the /api/v1 prefix.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + API_PREFIX,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "MarketApiClient":
        return cls(config.market_api_url, timeout=config.request_timeout_seconds)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MarketApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """GET a path and return the decoded JSON body."""
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as exc:
            logger.warning("Market API timeout: GET %s", path)
            raise ApiTransportError(TIMEOUT_MESSAGE) from exc
        except httpx.RequestError as exc:
            logger.warning("Market API unreachable: GET %s (%s)", path, type(exc).__name__)
            raise ApiTransportError(NO_RESPONSE_MESSAGE) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            logger.warning("Market API error response: %d GET %s", response.status_code, path)
            message = _error_message(body) or (
                f"Request failed with status code {response.status_code}"
            )
            raise ApiResponseError(message, status_code=response.status_code)

        if body is None:
            raise MalformedPayloadError(f"Response from {path} is not valid JSON")
        return body

    async def _fetch(
        self,
        path: str,
        payload_type: Any,
        failure_message: str,
        params: Optional[dict] = None,
    ) -> Any:
        """GET a path, unwrap the envelope and validate its data."""
        body = await self._get_json(path, params)
        try:
            envelope = ApiEnvelope.model_validate(body)
        except ValidationError as exc:
            raise MalformedPayloadError(f"{failure_message}: invalid response envelope") from exc

        if not envelope.success or envelope.data is None:
            raise ApiResponseError(envelope.message or failure_message)

        try:
            return _adapter(payload_type).validate_python(envelope.data)
        except ValidationError as exc:
            logger.warning(
                "Market API payload failed validation for %s: %d error(s)",
                path,
                exc.error_count(),
            )
            raise MalformedPayloadError(f"{failure_message}: unexpected payload") from exc

    # ------------------------------------------------------------------
    # Stocks
    # ------------------------------------------------------------------

    async def get_stock_summary(self, symbol: str) -> StockSummary:
        payload = await self._fetch(
            f"/stocks/{_segment(symbol)}",
            StockSummaryPayload,
            f"Failed to fetch stock summary for {symbol}",
        )
        return payload.to_entity()

    async def get_stock_time_series(
        self, symbol: str, hours: int = 24, aggregation: str = "5m"
    ) -> StockTimeSeries:
        payload = await self._fetch(
            f"/stocks/{_segment(symbol)}/timeseries",
            StockTimeSeriesPayload,
            f"Failed to fetch stock time-series for {symbol}",
            params={"hours": hours, "aggregation": aggregation},
        )
        return payload.to_entity()

    async def get_all_stock_summaries(
        self, page: int = 0, size: int = 50
    ) -> Page[StockSummary]:
        payload = await self._fetch(
            "/stocks",
            PagePayload[StockSummaryPayload],
            "Failed to fetch stock summaries",
            params={"page": page, "size": size},
        )
        return payload.to_entity()

    async def get_top_performing_symbols(self, limit: int = 10) -> list[TopPerformer]:
        payload = await self._fetch(
            "/stocks/top-performers",
            list[TopPerformerPayload],
            "Failed to fetch top performing symbols",
            params={"limit": limit},
        )
        return [item.to_entity() for item in payload]

    # ------------------------------------------------------------------
    # Market
    # ------------------------------------------------------------------

    async def get_market_overview(self) -> MarketOverview:
        payload = await self._fetch(
            "/market/overview", MarketOverviewPayload, "Failed to fetch market overview"
        )
        return payload.to_entity()

    async def get_market_volatility(self, hours: int = 24) -> list[MetricPoint]:
        payload = await self._fetch(
            "/market/volatility",
            list[MetricPointPayload],
            "Failed to fetch market volatility",
            params={"hours": hours},
        )
        return [item.to_entity() for item in payload]

    # ------------------------------------------------------------------
    # Economic indicators
    # ------------------------------------------------------------------

    async def get_indicator_summary(self, indicator_id: str) -> EconomicIndicator:
        payload = await self._fetch(
            f"/economic/indicators/{_segment(indicator_id)}",
            EconomicIndicatorPayload,
            f"Failed to fetch economic indicator summary for {indicator_id}",
        )
        return payload.to_entity()

    async def get_all_indicator_summaries(
        self, page: int = 0, size: int = 20
    ) -> Page[EconomicIndicator]:
        payload = await self._fetch(
            "/economic/indicators",
            PagePayload[EconomicIndicatorPayload],
            "Failed to fetch all economic indicator summaries",
            params={"page": page, "size": size},
        )
        return payload.to_entity()

    async def get_indicator_time_series(
        self, indicator_id: str, days: int = 30
    ) -> list[EconomicDataPoint]:
        payload = await self._fetch(
            f"/economic/indicators/{_segment(indicator_id)}/timeseries",
            list[EconomicDataPointPayload],
            f"Failed to fetch economic indicator time-series for {indicator_id}",
            params={"days": days},
        )
        return [item.to_entity() for item in payload]

    # ------------------------------------------------------------------
    # News
    # ------------------------------------------------------------------

    async def get_recent_news(self, hours: int = 24, limit: int = 50) -> list[NewsItem]:
        payload = await self._fetch(
            "/news",
            list[NewsItemPayload],
            "Failed to fetch recent news",
            params={"hours": hours, "limit": limit},
        )
        return [item.to_entity() for item in payload]

    async def get_news_by_sentiment(
        self, sentiment: str, hours: int = 24, limit: int = 20
    ) -> list[NewsItem]:
        payload = await self._fetch(
            f"/news/sentiment/{_segment(sentiment)}",
            list[NewsItemPayload],
            f"Failed to fetch news by sentiment: {sentiment}",
            params={"hours": hours, "limit": limit},
        )
        return [item.to_entity() for item in payload]

    async def get_news_for_symbol(
        self, symbol: str, hours: int = 24, limit: int = 20
    ) -> list[NewsItem]:
        payload = await self._fetch(
            f"/news/symbol/{_segment(symbol)}",
            list[NewsItemPayload],
            f"Failed to fetch news for symbol: {symbol}",
            params={"hours": hours, "limit": limit},
        )
        return [item.to_entity() for item in payload]

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def check_health(self) -> dict[str, Any]:
        body = await self._get_json("/health")
        if not isinstance(body, dict):
            raise MalformedPayloadError("Health response is not a JSON object")
        return body
