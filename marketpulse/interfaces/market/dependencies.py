"""
Dependency injection for the market bounded context.

Pages are mounted by the application lifespan and stored on
``app.state``; these FastAPI dependencies hand them to the routes.
"""

from fastapi import Request

from marketpulse.application.market.dashboard import DashboardPage
from marketpulse.application.market.stock_detail import StockDetailSession
from marketpulse.application.market.stocks import StocksPage
from marketpulse.domain.market.ports import MarketDataPort


def _mounted(request: Request, attribute: str):
    value = getattr(request.app.state, attribute, None)
    if value is None:
        raise RuntimeError(
            f"{attribute} is not initialized. "
            "Ensure the app lifespan has started."
        )
    return value


def get_dashboard_page(request: Request) -> DashboardPage:
    return _mounted(request, "dashboard")


def get_stocks_page(request: Request) -> StocksPage:
    return _mounted(request, "stocks")


def get_stock_detail(request: Request) -> StockDetailSession:
    return _mounted(request, "stock_detail")


def get_market_client(request: Request) -> MarketDataPort:
    return _mounted(request, "market_client")
