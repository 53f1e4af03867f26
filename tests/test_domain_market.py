"""
Tests for the market domain layer.

Tests entities and errors in isolation. No infrastructure needed.
"""

import dataclasses
from datetime import datetime, timezone

import pytest

from marketpulse.domain.market.entities import (
    MarketOverview,
    MarketSentiment,
    NewsItem,
    NewsSentiment,
    StockSummary,
    TopMovers,
    Trend,
)
from marketpulse.domain.market.errors import (
    ApiResponseError,
    ApiTransportError,
    InvalidTimeRangeError,
    MalformedPayloadError,
    MarketDataError,
    UnknownSectionError,
)

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _summary(**overrides) -> StockSummary:
    fields = dict(
        symbol="AAPL",
        current_price=189.5,
        volume=1000,
        volatility=0.2,
        price_change=2.3,
        price_change_percent=1.23,
        volume_average=900.0,
        trend=Trend.SIDEWAYS,
        timestamp=NOW,
        last_updated=NOW,
    )
    fields.update(overrides)
    return StockSummary(**fields)


class TestStockSummary:
    """Tests for the StockSummary entity."""

    def test_optional_fields_default_to_none(self) -> None:
        stock = _summary()
        assert stock.risk_score is None
        assert stock.support is None
        assert stock.resistance is None
        assert stock.has_levels is False

    def test_has_levels_with_one_level(self) -> None:
        assert _summary(resistance=192.0).has_levels is True

    def test_is_immutable(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            _summary().current_price = 1.0  # type: ignore[misc]


class TestDefaults:
    """Entities default to explicit unknowns rather than guesses."""

    def test_news_item_defaults(self) -> None:
        item = NewsItem(id="1", title="t", published_at=NOW)
        assert item.sentiment is NewsSentiment.UNKNOWN
        assert item.symbols == ()

    def test_market_overview_defaults(self) -> None:
        overview = MarketOverview(
            total_stocks=1,
            active_stocks=1,
            market_sentiment=MarketSentiment.NEUTRAL,
            last_updated=NOW,
        )
        assert overview.top_movers == TopMovers()
        assert overview.average_risk_score is None


class TestErrors:
    """Tests for the market error hierarchy."""

    @pytest.mark.parametrize(
        "error",
        [
            ApiTransportError("t"),
            ApiResponseError("r", status_code=500),
            MalformedPayloadError("m"),
            InvalidTimeRangeError(5, (1, 24)),
            UnknownSectionError("dashboard", "x"),
        ],
    )
    def test_all_errors_are_market_errors(self, error) -> None:
        assert isinstance(error, MarketDataError)
        assert error.message

    def test_response_error_status(self) -> None:
        assert ApiResponseError("r").status_code is None
        assert ApiResponseError("r", status_code=404).status_code == 404

    def test_invalid_time_range_message(self) -> None:
        error = InvalidTimeRangeError(5, (1, 6, 24, 72, 168))
        assert error.message == "Invalid time range: 5h. Must be one of [1, 6, 24, 72, 168]."
        assert error.hours == 5

    def test_unknown_section_attributes(self) -> None:
        error = UnknownSectionError("dashboard", "portfolio")
        assert error.page == "dashboard"
        assert error.section == "portfolio"
        assert "portfolio" in str(error)
