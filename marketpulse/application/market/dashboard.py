"""
Dashboard page: market-wide sections plus a detail panel for a selected
stock and a history panel for a selected economic indicator.

Independent sections poll from mount to unmount:

==================  ===========  =======================================
Section             Cadence      Source
==================  ===========  =======================================
market_overview     slow         get_market_overview()
stocks              fast         get_all_stock_summaries(0, N)
top_performers      ranking      get_top_performing_symbols(10)
indicators          slow         get_all_indicator_summaries(0, 20)
news                news         get_recent_news(24, 50)
volatility          slow         get_market_volatility(24)
==================  ===========  =======================================

Dependent sections stay idle until their selection is set:

- ``selected_stock`` polls ``(symbol,)`` at the fast cadence.
- ``selected_history`` fetches ``(symbol, range_hours)`` once per key.
- ``selected_news`` fetches ``(symbol, 24, 20)`` once per key.
- ``indicator_summary`` fetches ``(indicator_id,)`` once per key.
- ``indicator_history`` fetches ``(indicator_id, 30)`` once per key.
- ``sentiment_news`` fetches ``(sentiment, 24, 20)`` once per key.
"""

import logging
from typing import Any, Optional

from marketpulse.application.market.selection import (
    INDICATOR_HISTORY_DAYS,
    NEWS_WINDOW_HOURS,
    SYMBOL_NEWS_LIMIT,
    normalize_identifier,
    normalize_sentiment,
    normalize_symbol,
    validate_range,
)
from marketpulse.application.sync import (
    OneShotQuery,
    PollingQuery,
    QueryGroup,
    dependent_key,
)
from marketpulse.core.config import Settings, settings
from marketpulse.domain.market.ports import MarketDataPort

logger = logging.getLogger(__name__)

TOP_PERFORMERS_LIMIT = 10
INDICATORS_PAGE_SIZE = 20
NEWS_FEED_LIMIT = 50


class DashboardPage(QueryGroup):
    """Market dashboard with a selectable stock, indicator and news sentiment.

    Selecting a new symbol tears down the previous symbol's sections
    before the new ones start, so a late answer for the old symbol is
    never shown.
    """

    name = "dashboard"

    def __init__(self, market: MarketDataPort, config: Settings = settings) -> None:
        super().__init__()
        self._symbol: Optional[str] = None
        self._range_hours = validate_range(config.default_range_hours)
        self._indicator_id: Optional[str] = None
        self._sentiment: Optional[str] = None

        self.add(
            "market_overview",
            PollingQuery(market.get_market_overview, config.slow_poll_seconds),
        )
        self.add(
            "stocks",
            PollingQuery(
                market.get_all_stock_summaries,
                config.fast_poll_seconds,
                key=(0, config.dashboard_stock_count),
            ),
        )
        self.add(
            "top_performers",
            PollingQuery(
                market.get_top_performing_symbols,
                config.top_performers_poll_seconds,
                key=(TOP_PERFORMERS_LIMIT,),
            ),
        )
        self.add(
            "indicators",
            PollingQuery(
                market.get_all_indicator_summaries,
                config.slow_poll_seconds,
                key=(0, INDICATORS_PAGE_SIZE),
            ),
        )
        self.add(
            "news",
            PollingQuery(
                market.get_recent_news,
                config.news_poll_seconds,
                key=(NEWS_WINDOW_HOURS, NEWS_FEED_LIMIT),
            ),
        )
        self.add(
            "volatility",
            PollingQuery(
                market.get_market_volatility,
                config.slow_poll_seconds,
                key=(NEWS_WINDOW_HOURS,),
            ),
        )

        self.add(
            "selected_stock",
            PollingQuery(market.get_stock_summary, config.fast_poll_seconds, key=None),
        )
        self.add("selected_history", OneShotQuery(market.get_stock_time_series, key=None))
        self.add("selected_news", OneShotQuery(market.get_news_for_symbol, key=None))
        self.add(
            "indicator_summary",
            OneShotQuery(market.get_indicator_summary, key=None),
        )
        self.add(
            "indicator_history",
            OneShotQuery(market.get_indicator_time_series, key=None),
        )
        self.add(
            "sentiment_news",
            OneShotQuery(market.get_news_by_sentiment, key=None),
        )

    @property
    def symbol(self) -> Optional[str]:
        return self._symbol

    @property
    def range_hours(self) -> int:
        return self._range_hours

    @property
    def indicator_id(self) -> Optional[str]:
        return self._indicator_id

    @property
    def sentiment(self) -> Optional[str]:
        return self._sentiment

    def select_symbol(self, symbol: Optional[str]) -> None:
        """Open the detail panel for ``symbol``, or close it with None."""
        self._symbol = normalize_symbol(symbol)
        logger.info("Dashboard symbol selection: %s", self._symbol)
        self["selected_stock"].set_key(dependent_key(self._symbol))
        self["selected_history"].set_key(
            dependent_key(self._symbol, self._range_hours)
        )
        self["selected_news"].set_key(
            dependent_key(self._symbol, NEWS_WINDOW_HOURS, SYMBOL_NEWS_LIMIT)
        )

    def select_range(self, hours: int) -> None:
        """Change the history range of the detail panel."""
        self._range_hours = validate_range(hours)
        self["selected_history"].set_key(
            dependent_key(self._symbol, self._range_hours)
        )

    def select_indicator(self, indicator_id: Optional[str]) -> None:
        self._indicator_id = normalize_identifier(indicator_id)
        self["indicator_summary"].set_key(dependent_key(self._indicator_id))
        self["indicator_history"].set_key(
            dependent_key(self._indicator_id, INDICATOR_HISTORY_DAYS)
        )

    def select_sentiment(self, sentiment: Optional[str]) -> None:
        """Filter the sentiment news section, or switch it off with None."""
        self._sentiment = normalize_sentiment(sentiment)
        self["sentiment_news"].set_key(
            dependent_key(self._sentiment, NEWS_WINDOW_HOURS, SYMBOL_NEWS_LIMIT)
        )

    def selection(self) -> dict[str, Any]:
        return {
            "symbol": self._symbol,
            "range_hours": self._range_hours,
            "indicator_id": self._indicator_id,
            "sentiment": self._sentiment,
        }
