"""
Domain-specific errors for the market bounded context.

All errors raised from the domain layer must be defined here.
Fetch failures are flattened to a message at the query boundary;
page-level errors are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class MarketDataError(Exception):
    """Base error for all market data failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ApiTransportError(MarketDataError):
    """Raised when the market API could not be reached or timed out."""


class ApiResponseError(MarketDataError):
    """Raised when the market API answers with an error or unsuccessful envelope."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedPayloadError(MarketDataError):
    """Raised when a response body is not valid JSON or fails validation."""


class InvalidTimeRangeError(MarketDataError):
    """Raised when a history time range is not one of the supported ranges."""

    def __init__(self, hours: int, allowed: tuple[int, ...]) -> None:
        super().__init__(
            f"Invalid time range: {hours}h. Must be one of {list(allowed)}."
        )
        self.hours = hours


class UnknownSectionError(MarketDataError):
    """Raised when a page has no section with the requested name."""

    def __init__(self, page: str, section: str) -> None:
        super().__init__(f"Page {page!r} has no section {section!r}")
        self.page = page
        self.section = section
