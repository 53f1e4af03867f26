"""
Centralized error handlers for FastAPI.

Maps market domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse shape ``{"error", "detail"}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from marketpulse.domain.market.errors import (
    ApiResponseError,
    ApiTransportError,
    InvalidTimeRangeError,
    MarketDataError,
    UnknownSectionError,
)

logger = logging.getLogger(__name__)

HTTP_404 = 404
HTTP_422 = 422
HTTP_500 = 500
HTTP_502 = 502
HTTP_504 = 504


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(InvalidTimeRangeError)
    async def handle_invalid_time_range(
        _request: Request, exc: InvalidTimeRangeError
    ) -> JSONResponse:
        """Handle unsupported history ranges."""
        logger.warning("Invalid time range: %d", exc.hours)
        return _error_response(HTTP_422, "Invalid time range", exc.message)

    @app.exception_handler(UnknownSectionError)
    async def handle_unknown_section(
        _request: Request, exc: UnknownSectionError
    ) -> JSONResponse:
        """Handle retries addressed to a section the page does not have."""
        logger.warning("Unknown section %s on page %s", exc.section, exc.page)
        return _error_response(HTTP_404, "Section not found")

    @app.exception_handler(ApiTransportError)
    async def handle_upstream_unreachable(
        _request: Request, exc: ApiTransportError
    ) -> JSONResponse:
        """Handle an unreachable or timed out market API."""
        logger.warning("Market API unreachable: %s", exc.message)
        return _error_response(HTTP_504, "Market API unreachable", exc.message)

    @app.exception_handler(ApiResponseError)
    async def handle_upstream_error(
        _request: Request, exc: ApiResponseError
    ) -> JSONResponse:
        """Handle an error answer from the market API."""
        logger.warning("Market API error (status=%s): %s", exc.status_code, exc.message)
        return _error_response(HTTP_502, "Market API error", exc.message)

    @app.exception_handler(MarketDataError)
    async def handle_market_data(
        _request: Request, exc: MarketDataError
    ) -> JSONResponse:
        """Catch-all for remaining market data errors."""
        logger.error("Unhandled market data error: %s", exc.message)
        return _error_response(HTTP_502, "Market data unavailable")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
