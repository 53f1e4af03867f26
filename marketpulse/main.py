"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per bounded context)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Page lifecycle (mount on startup, unmount on shutdown; the stock
  detail page is mounted on demand by its routes)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from marketpulse.application.market.dashboard import DashboardPage
from marketpulse.application.market.stock_detail import StockDetailSession
from marketpulse.application.market.stocks import StocksPage
from marketpulse.core.config import settings
from marketpulse.domain.market.ports import MarketDataPort
from marketpulse.infrastructure.market.api_client import MarketApiClient
from marketpulse.interfaces.health import router as health_router
from marketpulse.interfaces.market.router import router as market_router
from marketpulse.shared.errors.handlers import register_error_handlers
from marketpulse.shared.logging import configure_logging
from marketpulse.shared.security.headers import SecurityHeadersMiddleware
from marketpulse.shared.security.rate_limiting import (
    limiter,
    rate_limit_exceeded_handler,
)

logger = logging.getLogger(__name__)


def _build_lifespan(market_client: Optional[MarketDataPort]):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Mount the pages on startup and tear them down on shutdown."""
        owns_client = market_client is None
        client = MarketApiClient.from_settings(settings) if owns_client else market_client

        dashboard = DashboardPage(client, settings)
        stocks = StocksPage(client, settings)
        stock_detail = StockDetailSession(client, settings)
        app.state.market_client = client
        app.state.dashboard = dashboard
        app.state.stocks = stocks
        app.state.stock_detail = stock_detail

        dashboard.activate()
        stocks.activate()
        logger.info("Market pages mounted against %s", settings.market_api_url)

        try:
            yield
        finally:
            dashboard.deactivate()
            stocks.deactivate()
            await dashboard.settle()
            await stocks.settle()
            await stock_detail.close()
            if owns_client:
                await client.aclose()
            app.state.dashboard = None
            app.state.stocks = None
            app.state.stock_detail = None
            app.state.market_client = None

    return lifespan


def create_app(market_client: Optional[MarketDataPort] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Args:
        market_client: Market data source for the pages. When omitted,
            an HTTP client for ``settings.market_api_url`` is created on
            startup and closed on shutdown.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=_build_lifespan(market_client),
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(market_router, prefix="/api/v1")

    return app


app = create_app()
