"""
Domain entities for the market bounded context.

Entities mirror the payloads served by the remote market-data API.
Values such as risk scores, trends and support/resistance levels are
computed upstream and carried here unchanged. Optional fields are
explicit: ``None`` means the API did not provide a value, and enums
carry an ``UNKNOWN`` member for unrecognised labels.

They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Trend(Enum):
    """Price trend label attached to a stock by the API."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    SIDEWAYS = "SIDEWAYS"
    UNKNOWN = "UNKNOWN"


class MarketSentiment(Enum):
    """Overall market sentiment label."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"
    UNKNOWN = "UNKNOWN"


class NewsSentiment(Enum):
    """Sentiment label attached to a news item."""

    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class StockSummary:
    """Latest quote and derived metrics for a single stock."""

    symbol: str
    current_price: float
    volume: int
    volatility: float
    price_change: float
    price_change_percent: float
    volume_average: float
    trend: Trend
    timestamp: datetime
    last_updated: datetime
    risk_score: Optional[float] = None
    support: Optional[float] = None
    resistance: Optional[float] = None

    @property
    def has_levels(self) -> bool:
        """Whether the API provided a support or resistance level."""
        return self.support is not None or self.resistance is not None


@dataclass(frozen=True)
class MetricPoint:
    """One aggregated bucket of a stock time series."""

    timestamp: datetime
    price: Optional[float] = None
    volume: Optional[int] = None
    volatility: Optional[float] = None
    risk_score: Optional[float] = None


@dataclass(frozen=True)
class StockTimeSeries:
    """Aggregated metrics for a stock over a time range."""

    symbol: str
    metrics: tuple[MetricPoint, ...]
    start: datetime
    end: datetime
    aggregation: str


@dataclass(frozen=True)
class StockMover:
    """A stock listed among the market's top movers."""

    symbol: str
    current_price: float
    change: float
    change_percent: float
    volume: int


@dataclass(frozen=True)
class TopMovers:
    gainers: tuple[StockMover, ...] = ()
    losers: tuple[StockMover, ...] = ()
    most_volatile: tuple[StockMover, ...] = ()


@dataclass(frozen=True)
class MarketOverview:
    """Market-wide aggregates."""

    total_stocks: int
    active_stocks: int
    market_sentiment: MarketSentiment
    last_updated: datetime
    average_risk_score: Optional[float] = None
    high_risk_stocks: tuple[str, ...] = ()
    top_movers: TopMovers = field(default_factory=TopMovers)


@dataclass(frozen=True)
class TopPerformer:
    symbol: str
    change_percent: float


@dataclass(frozen=True)
class EconomicIndicator:
    """Latest value of an economic indicator."""

    indicator: str
    value: float
    timestamp: datetime
    country: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class EconomicDataPoint:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class NewsItem:
    """A news article with its upstream sentiment classification."""

    id: str
    title: str
    published_at: datetime
    sentiment: NewsSentiment = NewsSentiment.UNKNOWN
    summary: Optional[str] = None
    source: Optional[str] = None
    url: Optional[str] = None
    symbols: tuple[str, ...] = ()


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated listing."""

    items: tuple[T, ...]
    page: int
    size: int
    total_elements: int
    total_pages: int
    has_next: bool
    has_previous: bool
