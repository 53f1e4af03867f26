"""
MarketPulse: market-data dashboard backend.

Application package root. A modular monolith using hexagonal
architecture (ports & adapters).

Bounded contexts:
    - market: Stocks, market overview, economic indicators and news
      polled from a remote market-data API.

Layers:
    - domain: Entities, ports (ABCs), errors.
    - application: Keyed one-shot/polling queries and the pages composed of them.
    - infrastructure: The httpx adapter implementing the market data port.
    - interfaces: FastAPI routers and Pydantic schemas serving page snapshots.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
