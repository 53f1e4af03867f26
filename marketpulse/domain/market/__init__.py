"""
Market bounded context: domain layer.

Typed payloads for stocks, market overview, economic indicators and
news, the port the API client implements, and the error taxonomy.
"""
