"""
Shared test doubles.

``FakeMarket`` implements MarketDataPort in memory. It records every
call, answers with canned entities, and can be told to fail a method
or to hold its answers until an ``asyncio.Event`` is set.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from marketpulse.domain.market.entities import (
    EconomicDataPoint,
    EconomicIndicator,
    MarketOverview,
    MarketSentiment,
    MetricPoint,
    NewsItem,
    NewsSentiment,
    Page,
    StockSummary,
    StockTimeSeries,
    TopPerformer,
    Trend,
)
from marketpulse.domain.market.ports import MarketDataPort

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def stock_summary(symbol: str, price: float = 100.0) -> StockSummary:
    return StockSummary(
        symbol=symbol,
        current_price=price,
        volume=1_000,
        volatility=0.2,
        price_change=1.5,
        price_change_percent=1.52,
        volume_average=900.0,
        trend=Trend.BULLISH,
        timestamp=NOW,
        last_updated=NOW,
    )


def stock_page(page: int, size: int, symbols: tuple[str, ...] = ("AAPL", "MSFT")) -> Page:
    return Page(
        items=tuple(stock_summary(s) for s in symbols),
        page=page,
        size=size,
        total_elements=len(symbols),
        total_pages=1,
        has_next=False,
        has_previous=page > 0,
    )


class FakeMarket(MarketDataPort):
    """In-memory market data source.

    Attributes:
        calls: ``(method, args)`` for every call, in call order.
        errors: Exception to raise per method name.
        gates: Event to wait on per method name before answering.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.errors: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    def calls_to(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    async def _answer(self, method: str, args: tuple, result: Any) -> Any:
        self.calls.append((method, args))
        for gate in (self.gate, self.gates.get(method)):
            if gate is not None:
                await gate.wait()
        error = self.errors.get(method)
        if error is not None:
            raise error
        return result

    async def get_stock_summary(self, symbol):
        return await self._answer("get_stock_summary", (symbol,), stock_summary(symbol))

    async def get_stock_time_series(self, symbol, hours=24, aggregation="5m"):
        series = StockTimeSeries(
            symbol=symbol,
            metrics=(MetricPoint(timestamp=NOW, price=100.0),),
            start=NOW,
            end=NOW,
            aggregation=aggregation,
        )
        return await self._answer("get_stock_time_series", (symbol, hours), series)

    async def get_all_stock_summaries(self, page=0, size=50):
        return await self._answer(
            "get_all_stock_summaries", (page, size), stock_page(page, size)
        )

    async def get_top_performing_symbols(self, limit=10):
        performers = [TopPerformer("NVDA", 4.2), TopPerformer("AAPL", 1.5)]
        return await self._answer("get_top_performing_symbols", (limit,), performers)

    async def get_market_overview(self):
        overview = MarketOverview(
            total_stocks=2,
            active_stocks=2,
            market_sentiment=MarketSentiment.BULLISH,
            last_updated=NOW,
        )
        return await self._answer("get_market_overview", (), overview)

    async def get_market_volatility(self, hours=24):
        return await self._answer("get_market_volatility", (hours,), [])

    async def get_indicator_summary(self, indicator_id):
        indicator = EconomicIndicator(indicator=indicator_id, value=3.1, timestamp=NOW)
        return await self._answer("get_indicator_summary", (indicator_id,), indicator)

    async def get_all_indicator_summaries(self, page=0, size=20):
        listing = Page(
            items=(EconomicIndicator(indicator="CPI", value=3.1, timestamp=NOW),),
            page=page,
            size=size,
            total_elements=1,
            total_pages=1,
            has_next=False,
            has_previous=False,
        )
        return await self._answer("get_all_indicator_summaries", (page, size), listing)

    async def get_indicator_time_series(self, indicator_id, days=30):
        points = [EconomicDataPoint(timestamp=NOW, value=3.1)]
        return await self._answer("get_indicator_time_series", (indicator_id, days), points)

    async def get_recent_news(self, hours=24, limit=50):
        news = [NewsItem(id="1", title="Markets rally", published_at=NOW)]
        return await self._answer("get_recent_news", (hours, limit), news)

    async def get_news_by_sentiment(self, sentiment, hours=24, limit=20):
        return await self._answer("get_news_by_sentiment", (sentiment, hours, limit), [])

    async def get_news_for_symbol(self, symbol, hours=24, limit=20):
        news = [
            NewsItem(
                id=f"{symbol}-1",
                title=f"{symbol} beats estimates",
                published_at=NOW,
                sentiment=NewsSentiment.POSITIVE,
                symbols=(symbol,),
            )
        ]
        return await self._answer("get_news_for_symbol", (symbol, hours, limit), news)

    async def check_health(self):
        return await self._answer("check_health", (), {"status": "UP"})

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def market() -> FakeMarket:
    return FakeMarket()
