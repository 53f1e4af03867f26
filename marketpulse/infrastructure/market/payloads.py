"""
Pydantic models for the remote market API's JSON payloads.

The API speaks camelCase and wraps every payload in an envelope
``{success, data, message, timestamp, errors}``. These models validate
the wire shape and map it to the frozen domain entities. Labels the
domain does not know (trends, sentiments) become ``UNKNOWN`` instead of
failing the whole payload.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from marketpulse.domain.market.entities import (
    EconomicDataPoint,
    EconomicIndicator,
    MarketOverview,
    MarketSentiment,
    MetricPoint,
    NewsItem,
    NewsSentiment,
    Page,
    StockMover,
    StockSummary,
    StockTimeSeries,
    TopMovers,
    TopPerformer,
    Trend,
)

E = TypeVar("E", bound=Enum)


def _label(enum_cls: type[E], value: Any) -> E:
    """Map a wire label to an enum member, falling back to UNKNOWN."""
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return enum_cls["UNKNOWN"]
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return enum_cls["UNKNOWN"]


class WirePayload(BaseModel):
    """Base for camelCase API payloads. Unknown fields are ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


P = TypeVar("P", bound=WirePayload)


class ApiEnvelope(WirePayload):
    success: bool = False
    data: Any = None
    message: Optional[str] = None
    timestamp: Any = None
    errors: Optional[list[Any]] = None


class StockSummaryPayload(WirePayload):
    symbol: str
    current_price: float
    volume: int
    volatility: float = 0.0
    price_change: float
    price_change_percent: float
    volume_average: float = 0.0
    risk_score: Optional[float] = None
    trend: Trend = Trend.UNKNOWN
    support: Optional[float] = None
    resistance: Optional[float] = None
    timestamp: datetime
    last_updated: Optional[datetime] = None

    @field_validator("trend", mode="before")
    @classmethod
    def _coerce_trend(cls, value: Any) -> Trend:
        return _label(Trend, value)

    def to_entity(self) -> StockSummary:
        return StockSummary(
            symbol=self.symbol,
            current_price=self.current_price,
            volume=self.volume,
            volatility=self.volatility,
            price_change=self.price_change,
            price_change_percent=self.price_change_percent,
            volume_average=self.volume_average,
            trend=self.trend,
            timestamp=self.timestamp,
            last_updated=self.last_updated or self.timestamp,
            risk_score=self.risk_score,
            support=self.support,
            resistance=self.resistance,
        )


class MetricPointPayload(WirePayload):
    timestamp: datetime
    price: Optional[float] = None
    volume: Optional[int] = None
    volatility: Optional[float] = None
    risk_score: Optional[float] = None

    def to_entity(self) -> MetricPoint:
        return MetricPoint(
            timestamp=self.timestamp,
            price=self.price,
            volume=self.volume,
            volatility=self.volatility,
            risk_score=self.risk_score,
        )


class TimeRangePayload(WirePayload):
    start: datetime
    end: datetime


class StockTimeSeriesPayload(WirePayload):
    symbol: str
    metrics: list[MetricPointPayload] = Field(default_factory=list)
    time_range: TimeRangePayload
    aggregation: str = "5m"

    def to_entity(self) -> StockTimeSeries:
        return StockTimeSeries(
            symbol=self.symbol,
            metrics=tuple(point.to_entity() for point in self.metrics),
            start=self.time_range.start,
            end=self.time_range.end,
            aggregation=self.aggregation,
        )


class StockMoverPayload(WirePayload):
    symbol: str
    current_price: float
    change: float
    change_percent: float
    volume: int = 0

    def to_entity(self) -> StockMover:
        return StockMover(
            symbol=self.symbol,
            current_price=self.current_price,
            change=self.change,
            change_percent=self.change_percent,
            volume=self.volume,
        )


class TopMoversPayload(WirePayload):
    gainers: list[StockMoverPayload] = Field(default_factory=list)
    losers: list[StockMoverPayload] = Field(default_factory=list)
    most_volatile: list[StockMoverPayload] = Field(default_factory=list)

    def to_entity(self) -> TopMovers:
        return TopMovers(
            gainers=tuple(m.to_entity() for m in self.gainers),
            losers=tuple(m.to_entity() for m in self.losers),
            most_volatile=tuple(m.to_entity() for m in self.most_volatile),
        )


class MarketOverviewPayload(WirePayload):
    total_stocks: int
    active_stocks: int
    average_risk_score: Optional[float] = None
    high_risk_stocks: list[str] = Field(default_factory=list)
    top_movers: TopMoversPayload = Field(default_factory=TopMoversPayload)
    market_sentiment: MarketSentiment = MarketSentiment.UNKNOWN
    last_updated: datetime

    @field_validator("market_sentiment", mode="before")
    @classmethod
    def _coerce_sentiment(cls, value: Any) -> MarketSentiment:
        return _label(MarketSentiment, value)

    def to_entity(self) -> MarketOverview:
        return MarketOverview(
            total_stocks=self.total_stocks,
            active_stocks=self.active_stocks,
            market_sentiment=self.market_sentiment,
            last_updated=self.last_updated,
            average_risk_score=self.average_risk_score,
            high_risk_stocks=tuple(self.high_risk_stocks),
            top_movers=self.top_movers.to_entity(),
        )


class TopPerformerPayload(WirePayload):
    """Wire shape is a serialized pair: ``{"first": symbol, "second": change}``."""

    first: str
    second: float

    def to_entity(self) -> TopPerformer:
        return TopPerformer(symbol=self.first, change_percent=self.second)


class EconomicIndicatorPayload(WirePayload):
    indicator: str
    value: float
    country: Optional[str] = None
    timestamp: datetime
    description: Optional[str] = None

    def to_entity(self) -> EconomicIndicator:
        return EconomicIndicator(
            indicator=self.indicator,
            value=self.value,
            timestamp=self.timestamp,
            country=self.country,
            description=self.description,
        )


class EconomicDataPointPayload(WirePayload):
    timestamp: datetime
    value: float

    def to_entity(self) -> EconomicDataPoint:
        return EconomicDataPoint(timestamp=self.timestamp, value=self.value)


class NewsItemPayload(WirePayload):
    id: str
    title: str
    summary: Optional[str] = None
    source: Optional[str] = None
    url: Optional[str] = None
    published_at: datetime
    sentiment: NewsSentiment = NewsSentiment.UNKNOWN
    symbols: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("sentiment", mode="before")
    @classmethod
    def _coerce_sentiment(cls, value: Any) -> NewsSentiment:
        return _label(NewsSentiment, value)

    def to_entity(self) -> NewsItem:
        return NewsItem(
            id=self.id,
            title=self.title,
            published_at=self.published_at,
            sentiment=self.sentiment,
            summary=self.summary,
            source=self.source,
            url=self.url,
            symbols=tuple(self.symbols),
        )


class PagePayload(WirePayload, Generic[P]):
    data: list[P] = Field(default_factory=list)
    page: int = 0
    size: int = 0
    total_elements: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_previous: bool = False

    def to_entity(self) -> Page:
        return Page(
            items=tuple(item.to_entity() for item in self.data),
            page=self.page,
            size=self.size,
            total_elements=self.total_elements,
            total_pages=self.total_pages,
            has_next=self.has_next,
            has_previous=self.has_previous,
        )
