"""
FastAPI router for the market bounded context.

Serves page snapshots to an external render tree and accepts the
user actions that drive them: selections and manual refreshes.
The stock detail page is mounted on demand for the symbol requested
and replaces the previously open one.
All routes delegate to pages. No business logic here.
Error mapping is handled by centralized error handlers.

Routes are ``async`` so they run on the event loop that owns the
pages' timers and fetch tasks.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from marketpulse.application.market.dashboard import DashboardPage
from marketpulse.application.market.stock_detail import StockDetailSession
from marketpulse.application.market.stocks import StocksPage
from marketpulse.core.config import settings
from marketpulse.domain.market.ports import MarketDataPort
from marketpulse.interfaces.market.dependencies import (
    get_dashboard_page,
    get_market_client,
    get_stock_detail,
    get_stocks_page,
)
from marketpulse.interfaces.market.schemas import (
    SYMBOL_MAX_LEN,
    SYMBOL_PATTERN,
    DashboardSelectionRequest,
    ErrorResponse,
    PageResponse,
    RefreshResponse,
    StockRangeRequest,
    StocksPageRequest,
    UpstreamHealthResponse,
)
from marketpulse.shared.security.rate_limiting import limiter

router = APIRouter(tags=["market"])

Symbol = Annotated[
    str, Path(min_length=1, max_length=SYMBOL_MAX_LEN, pattern=SYMBOL_PATTERN)
]


# ------------------------------------------------------------------
# Dashboard
# ------------------------------------------------------------------


@router.get(
    "/dashboard",
    response_model=PageResponse,
    summary="Dashboard snapshot",
    description="Current state of every dashboard section.",
)
async def get_dashboard(
    page: DashboardPage = Depends(get_dashboard_page),
) -> PageResponse:
    return PageResponse.from_snapshot(page.snapshot())


@router.put(
    "/dashboard/selection",
    response_model=PageResponse,
    summary="Change dashboard selections",
    responses={422: {"model": ErrorResponse}},
    description="Select a stock, a history range, an economic indicator or a news sentiment.",
)
async def update_dashboard_selection(
    body: DashboardSelectionRequest,
    page: DashboardPage = Depends(get_dashboard_page),
) -> PageResponse:
    """Apply the selections present in the body, in a fixed order."""
    provided = body.model_fields_set
    if "range_hours" in provided and body.range_hours is not None:
        page.select_range(body.range_hours)
    if "symbol" in provided:
        page.select_symbol(body.symbol)
    if "indicator_id" in provided:
        page.select_indicator(body.indicator_id)
    if "sentiment" in provided:
        page.select_sentiment(body.sentiment)
    return PageResponse.from_snapshot(page.snapshot())


@router.post(
    "/dashboard/refresh",
    response_model=RefreshResponse,
    summary="Refresh the dashboard",
    description="Refetch every enabled section regardless of its schedule.",
)
@limiter.limit(settings.rate_limit_refresh)
async def refresh_dashboard(
    request: Request,
    page: DashboardPage = Depends(get_dashboard_page),
) -> RefreshResponse:
    return RefreshResponse(page=page.name, refreshed=page.refresh())


@router.post(
    "/dashboard/sections/{section}/retry",
    response_model=RefreshResponse,
    summary="Retry one dashboard section",
    responses={404: {"model": ErrorResponse}},
    description="Refetch a single section, leaving the others untouched.",
)
async def retry_dashboard_section(
    section: str,
    page: DashboardPage = Depends(get_dashboard_page),
) -> RefreshResponse:
    refreshed = [section] if page.retry(section) else []
    return RefreshResponse(page=page.name, refreshed=refreshed)


# ------------------------------------------------------------------
# Stock listing
# ------------------------------------------------------------------


@router.get(
    "/stocks",
    response_model=PageResponse,
    summary="Stock listing snapshot",
)
async def get_stocks(page: StocksPage = Depends(get_stocks_page)) -> PageResponse:
    return PageResponse.from_snapshot(page.snapshot())


@router.put(
    "/stocks/page",
    response_model=PageResponse,
    summary="Change the listing page",
)
async def select_stocks_page(
    body: StocksPageRequest,
    page: StocksPage = Depends(get_stocks_page),
) -> PageResponse:
    page.select_page(body.page)
    return PageResponse.from_snapshot(page.snapshot())


@router.post(
    "/stocks/refresh",
    response_model=RefreshResponse,
    summary="Refresh the stock listing",
)
@limiter.limit(settings.rate_limit_refresh)
async def refresh_stocks(
    request: Request,
    page: StocksPage = Depends(get_stocks_page),
) -> RefreshResponse:
    return RefreshResponse(page=page.name, refreshed=page.refresh())


# ------------------------------------------------------------------
# Stock detail
# ------------------------------------------------------------------


@router.get(
    "/stocks/{symbol}",
    response_model=PageResponse,
    summary="Stock detail snapshot",
    responses={422: {"model": ErrorResponse}},
    description="Open the detail page of a symbol and return its sections.",
)
async def get_stock_detail_page(
    symbol: Symbol,
    session: StockDetailSession = Depends(get_stock_detail),
) -> PageResponse:
    page = await session.open(symbol)
    return PageResponse.from_snapshot(page.snapshot())


@router.put(
    "/stocks/{symbol}/range",
    response_model=PageResponse,
    summary="Change the history range of a stock",
    responses={422: {"model": ErrorResponse}},
)
async def select_stock_range(
    body: StockRangeRequest,
    symbol: Symbol,
    session: StockDetailSession = Depends(get_stock_detail),
) -> PageResponse:
    page = await session.open(symbol)
    page.select_range(body.range_hours)
    return PageResponse.from_snapshot(page.snapshot())


@router.post(
    "/stocks/{symbol}/refresh",
    response_model=RefreshResponse,
    summary="Refresh a stock detail page",
    description="Refetch the quote, price history and news of a symbol.",
)
@limiter.limit(settings.rate_limit_refresh)
async def refresh_stock_detail(
    request: Request,
    symbol: Symbol,
    session: StockDetailSession = Depends(get_stock_detail),
) -> RefreshResponse:
    page = await session.open(symbol)
    return RefreshResponse(page=page.name, refreshed=page.refresh())


# ------------------------------------------------------------------
# Upstream
# ------------------------------------------------------------------


@router.get(
    "/health/upstream",
    response_model=UpstreamHealthResponse,
    summary="Market API health",
    responses={502: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
    description="Proxy the health document of the remote market API.",
)
async def upstream_health(
    client: MarketDataPort = Depends(get_market_client),
) -> UpstreamHealthResponse:
    document = await client.check_health()
    return UpstreamHealthResponse(status="ok", upstream=document)
