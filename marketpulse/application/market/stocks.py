"""
Stock listing page: one paginated list polled at the fast cadence.
"""

from typing import Any

from marketpulse.application.sync import PollingQuery, QueryGroup
from marketpulse.core.config import Settings, settings
from marketpulse.domain.market.ports import MarketDataPort


class StocksPage(QueryGroup):
    name = "stocks"

    def __init__(self, market: MarketDataPort, config: Settings = settings) -> None:
        super().__init__()
        self._page = 0
        self._size = config.stocks_page_size
        self.add(
            "stocks",
            PollingQuery(
                market.get_all_stock_summaries,
                config.fast_poll_seconds,
                key=(self._page, self._size),
            ),
        )

    @property
    def page(self) -> int:
        return self._page

    def select_page(self, page: int) -> None:
        """Show another page. The previous page's timer is torn down first."""
        if page < 0:
            raise ValueError(f"Page index must be >= 0, got {page}")
        self._page = page
        self["stocks"].set_key((self._page, self._size))

    def selection(self) -> dict[str, Any]:
        return {"page": self._page, "size": self._size}
