"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here. No scattered magic strings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        market_api_url: Base URL of the remote market-data API.
        request_timeout_seconds: Per-request timeout enforced by the API client.
        fast_poll_seconds: Cadence for fast-moving data (quotes, stock lists).
        top_performers_poll_seconds: Cadence for the top performers ranking.
        slow_poll_seconds: Cadence for slow-moving aggregates.
        news_poll_seconds: Cadence for news feeds.
        default_range_hours: Initial time range for price history views.
        dashboard_stock_count: Number of stocks shown on the dashboard.
        stocks_page_size: Page size of the full stock listing.
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_refresh: Rate limit for manual refresh endpoints.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "MarketPulse"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    market_api_url: str = "http://localhost:8080"
    request_timeout_seconds: float = 15.0

    fast_poll_seconds: float = 30.0
    top_performers_poll_seconds: float = 60.0
    slow_poll_seconds: float = 300.0
    news_poll_seconds: float = 900.0

    default_range_hours: int = 24
    dashboard_stock_count: int = 12
    stocks_page_size: int = 50

    rate_limit_default: str = "60/minute"
    rate_limit_refresh: str = "10/minute"


settings = Settings()
