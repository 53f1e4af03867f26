"""
Pydantic schemas for the page snapshot API.

These schemas enforce input validation and define the API contract
between the query layer and an external render tree.
No business logic belongs here.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from marketpulse.application.sync import PageSnapshot, QueryState

SYMBOL_DESCRIPTION = "Stock ticker symbol; null closes the detail panel"
SYMBOL_PATTERN = r"^[A-Za-z0-9.\-]*$"
SYMBOL_MAX_LEN = 12


class HealthResponse(BaseModel):
    """Response schema for health endpoint."""

    status: str
    version: str


class UpstreamHealthResponse(BaseModel):
    """Health document reported by the remote market API."""

    status: str
    upstream: dict[str, Any]


class SectionResponse(BaseModel):
    """State of one page section, as exposed to the render tree.

    ``data`` carries the section's domain payload unchanged.
    """

    data: Any = None
    loading: bool
    error: Optional[str] = None
    enabled: bool
    key: Optional[list[Any]] = None

    @classmethod
    def from_state(cls, state: QueryState) -> "SectionResponse":
        return cls(
            data=state.data,
            loading=state.loading,
            error=state.error_message,
            enabled=state.enabled,
            key=list(state.key) if state.key is not None else None,
        )


class PageResponse(BaseModel):
    """Snapshot of every section of a page."""

    page: str
    fully_loading: bool
    selection: dict[str, Any]
    sections: dict[str, SectionResponse]

    @classmethod
    def from_snapshot(cls, snapshot: PageSnapshot) -> "PageResponse":
        return cls(
            page=snapshot.name,
            fully_loading=snapshot.fully_loading,
            selection=snapshot.selection,
            sections={
                name: SectionResponse.from_state(state)
                for name, state in snapshot.sections.items()
            },
        )


class DashboardSelectionRequest(BaseModel):
    """Request schema for changing dashboard selections.

    Only fields present in the body are applied. An explicit null
    clears the symbol, indicator or sentiment selection.

    Attributes:
        symbol: Ticker to open in the detail panel.
        range_hours: History range of the detail panel (1, 6, 24, 72, 168).
        indicator_id: Economic indicator whose history to show.
        sentiment: News sentiment to filter the sentiment news section by.
    """

    symbol: Optional[str] = Field(
        default=None,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    range_hours: Optional[int] = Field(
        default=None, gt=0, description="History range in hours"
    )
    indicator_id: Optional[str] = Field(
        default=None, max_length=64, description="Economic indicator identifier"
    )
    sentiment: Optional[Literal["POSITIVE", "NEGATIVE", "NEUTRAL"]] = Field(
        default=None, description="News sentiment filter; null switches it off"
    )


class StockRangeRequest(BaseModel):
    """Request schema for changing the history range of a stock detail page."""

    range_hours: int = Field(..., gt=0, description="History range in hours")


class StocksPageRequest(BaseModel):
    """Request schema for paging through the stock listing."""

    page: int = Field(..., ge=0, description="Zero-based page index")


class RefreshResponse(BaseModel):
    """Sections that issued a fetch in response to a manual refresh."""

    page: str
    refreshed: list[str]


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None
