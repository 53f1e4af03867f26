"""
Port interfaces (ABCs) for the market bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any

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


class MarketDataPort(ABC):
    """Port for reading market data from the remote API.

    Every method is a coroutine that resolves to a typed entity or raises
    a ``MarketDataError``. Implementations enforce their own request
    timeout and never retry.
    """

    @abstractmethod
    async def get_stock_summary(self, symbol: str) -> StockSummary:
        """Return the latest summary for a symbol."""
        raise NotImplementedError

    @abstractmethod
    async def get_stock_time_series(
        self, symbol: str, hours: int = 24, aggregation: str = "5m"
    ) -> StockTimeSeries:
        """Return aggregated metrics for a symbol over the last N hours."""
        raise NotImplementedError

    @abstractmethod
    async def get_all_stock_summaries(
        self, page: int = 0, size: int = 50
    ) -> Page[StockSummary]:
        """Return one page of stock summaries."""
        raise NotImplementedError

    @abstractmethod
    async def get_top_performing_symbols(self, limit: int = 10) -> list[TopPerformer]:
        """Return the best performing symbols, best first."""
        raise NotImplementedError

    @abstractmethod
    async def get_market_overview(self) -> MarketOverview:
        raise NotImplementedError

    @abstractmethod
    async def get_market_volatility(self, hours: int = 24) -> list[MetricPoint]:
        raise NotImplementedError

    @abstractmethod
    async def get_indicator_summary(self, indicator_id: str) -> EconomicIndicator:
        raise NotImplementedError

    @abstractmethod
    async def get_all_indicator_summaries(
        self, page: int = 0, size: int = 20
    ) -> Page[EconomicIndicator]:
        raise NotImplementedError

    @abstractmethod
    async def get_indicator_time_series(
        self, indicator_id: str, days: int = 30
    ) -> list[EconomicDataPoint]:
        raise NotImplementedError

    @abstractmethod
    async def get_recent_news(self, hours: int = 24, limit: int = 50) -> list[NewsItem]:
        raise NotImplementedError

    @abstractmethod
    async def get_news_by_sentiment(
        self, sentiment: str, hours: int = 24, limit: int = 20
    ) -> list[NewsItem]:
        raise NotImplementedError

    @abstractmethod
    async def get_news_for_symbol(
        self, symbol: str, hours: int = 24, limit: int = 20
    ) -> list[NewsItem]:
        raise NotImplementedError

    @abstractmethod
    async def check_health(self) -> dict[str, Any]:
        """Return the raw health document of the remote API."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release any held connections. Default is a no-op."""
        return None
