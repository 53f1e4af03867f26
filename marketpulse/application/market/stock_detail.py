"""
Stock detail page for a fixed symbol.

The quote polls at the fast cadence; the price history is fetched once
per ``(symbol, range_hours)`` and again on manual refresh; news for the
symbol is fetched once.

``StockDetailSession`` keeps the page of the symbol a render tree has
open and swaps it when another symbol is opened.
"""

import asyncio
import logging
from typing import Any, Optional

from marketpulse.application.market.selection import (
    NEWS_WINDOW_HOURS,
    SYMBOL_NEWS_LIMIT,
    normalize_symbol,
    validate_range,
)
from marketpulse.application.sync import OneShotQuery, PollingQuery, QueryGroup
from marketpulse.core.config import Settings, settings
from marketpulse.domain.market.ports import MarketDataPort

logger = logging.getLogger(__name__)


class StockDetailPage(QueryGroup):
    """Quote, price history and news for one symbol.

    Raises:
        ValueError: If ``symbol`` is blank.
    """

    name = "stock_detail"

    def __init__(
        self, market: MarketDataPort, symbol: str, config: Settings = settings
    ) -> None:
        super().__init__()
        normalized = normalize_symbol(symbol)
        if normalized is None:
            raise ValueError("Stock symbol not provided")
        self._symbol = normalized
        self._range_hours = validate_range(config.default_range_hours)

        self.add(
            "stock",
            PollingQuery(
                market.get_stock_summary, config.fast_poll_seconds, key=(normalized,)
            ),
        )
        self.add(
            "history",
            OneShotQuery(
                market.get_stock_time_series,
                key=(normalized, self._range_hours),
                keep_previous_data=True,
            ),
        )
        self.add(
            "news",
            OneShotQuery(
                market.get_news_for_symbol,
                key=(normalized, NEWS_WINDOW_HOURS, SYMBOL_NEWS_LIMIT),
            ),
        )

    @property
    def symbol(self) -> str:
        return self._symbol

    def select_range(self, hours: int) -> None:
        self._range_hours = validate_range(hours)
        logger.debug("Stock detail %s range -> %dh", self._symbol, hours)
        self["history"].set_key((self._symbol, self._range_hours))

    def selection(self) -> dict[str, Any]:
        return {"symbol": self._symbol, "range_hours": self._range_hours}


class StockDetailSession:
    """Holds the detail page of the one symbol currently open.

    Opening another symbol unmounts the previous page and waits for its
    in-flight fetches before the new page is mounted, so at most one
    detail page polls at a time.
    """

    def __init__(self, market: MarketDataPort, config: Settings = settings) -> None:
        self._market = market
        self._config = config
        self._page: Optional[StockDetailPage] = None
        self._lock = asyncio.Lock()

    @property
    def page(self) -> Optional[StockDetailPage]:
        return self._page

    async def open(self, symbol: str) -> StockDetailPage:
        """Return the mounted page for ``symbol``, mounting it if needed.

        Raises:
            ValueError: If ``symbol`` is blank.
        """
        normalized = normalize_symbol(symbol)
        if normalized is None:
            raise ValueError("Stock symbol not provided")
        async with self._lock:
            if self._page is not None and self._page.symbol == normalized:
                return self._page
            await self._unmount()
            page = StockDetailPage(self._market, normalized, self._config)
            page.activate()
            self._page = page
            logger.info("Stock detail opened for %s", normalized)
            return page

    async def close(self) -> None:
        """Unmount the open page, if any."""
        async with self._lock:
            await self._unmount()

    async def _unmount(self) -> None:
        page, self._page = self._page, None
        if page is None:
            return
        page.deactivate()
        await page.settle()
        logger.info("Stock detail closed for %s", page.symbol)
