"""
Tests for the market pages (query groups).

Pages run against the in-memory FakeMarket. Polling intervals are the
configured defaults (tens of seconds), so no timer ticks during a
test; every fetch observed comes from activation, a key change or a
manual refresh.
"""

import asyncio

import pytest

from marketpulse.application.market.dashboard import DashboardPage
from marketpulse.application.market.selection import (
    normalize_identifier,
    normalize_sentiment,
    normalize_symbol,
    validate_range,
)
from marketpulse.application.market.stock_detail import StockDetailPage, StockDetailSession
from marketpulse.application.market.stocks import StocksPage
from marketpulse.domain.market.errors import (
    ApiResponseError,
    InvalidTimeRangeError,
    UnknownSectionError,
)

INDEPENDENT_SECTIONS = [
    "market_overview", "stocks", "top_performers", "indicators", "news", "volatility",
]
DEPENDENT_SECTIONS = [
    "selected_stock", "selected_history", "selected_news",
    "indicator_summary", "indicator_history", "sentiment_news",
]


async def _drain() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


class TestSelectionHelpers:
    """Normalisation of user selections."""

    def test_normalize_symbol(self) -> None:
        assert normalize_symbol(" aapl ") == "AAPL"
        assert normalize_symbol("   ") is None
        assert normalize_symbol(None) is None

    def test_normalize_identifier_keeps_case(self) -> None:
        assert normalize_identifier(" gdp-US ") == "gdp-US"
        assert normalize_identifier("") is None

    def test_normalize_sentiment(self) -> None:
        assert normalize_sentiment(" positive ") == "POSITIVE"
        assert normalize_sentiment("") is None
        with pytest.raises(ValueError, match="Unknown news sentiment"):
            normalize_sentiment("MIXED")

    def test_validate_range(self) -> None:
        assert validate_range(72) == 72
        with pytest.raises(InvalidTimeRangeError) as excinfo:
            validate_range(5)
        assert excinfo.value.hours == 5
        assert "Must be one of [1, 6, 24, 72, 168]" in excinfo.value.message


class TestDashboardMount:
    """Mounting starts every independent section and no dependent one."""

    @pytest.mark.asyncio
    async def test_initial_fetches(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        await page.settle()

        assert market.calls_to("get_market_overview") == [()]
        assert market.calls_to("get_all_stock_summaries") == [(0, 12)]
        assert market.calls_to("get_top_performing_symbols") == [(10,)]
        assert market.calls_to("get_all_indicator_summaries") == [(0, 20)]
        assert market.calls_to("get_recent_news") == [(24, 50)]
        assert market.calls_to("get_market_volatility") == [(24,)]
        assert market.calls_to("get_stock_summary") == []

        snapshot = page.snapshot()
        for name in INDEPENDENT_SECTIONS:
            assert snapshot.section(name).data is not None
            assert snapshot.section(name).loading is False
        for name in DEPENDENT_SECTIONS:
            assert snapshot.section(name).enabled is False
        assert snapshot.selection == {
            "symbol": None, "range_hours": 24, "indicator_id": None, "sentiment": None,
        }
        page.deactivate()

    @pytest.mark.asyncio
    async def test_fully_loading_until_first_answer(self, market) -> None:
        market.gate = asyncio.Event()
        page = DashboardPage(market)
        page.activate()
        await _drain()
        assert page.fully_loading is True

        market.gate.set()
        await page.settle()
        assert page.fully_loading is False
        page.deactivate()

    @pytest.mark.asyncio
    async def test_one_answer_ends_fully_loading(self, market) -> None:
        market.gate = None
        market.gates = {
            name: asyncio.Event()
            for name in ("get_all_stock_summaries", "get_top_performing_symbols",
                         "get_all_indicator_summaries", "get_recent_news")
        }
        page = DashboardPage(market)
        page.activate()
        await _drain()

        assert page.snapshot().section("market_overview").data is not None
        assert page.fully_loading is False
        for gate in market.gates.values():
            gate.set()
        await page.settle()
        page.deactivate()

    @pytest.mark.asyncio
    async def test_unmount_stops_everything(self, market) -> None:
        async with DashboardPage(market) as page:
            page.select_symbol("AAPL")
            await page.settle()
        assert page.active is False
        assert all(not q.active for q in page.sections.values())
        assert page.refresh() == []

    @pytest.mark.asyncio
    async def test_unmount_mid_fetch_leaves_nothing_loading(self, market) -> None:
        market.gate = asyncio.Event()
        page = DashboardPage(market)
        page.activate()
        page.select_symbol("AAPL")
        await _drain()
        assert page.fully_loading is True

        page.deactivate()
        market.gate.set()
        await page.settle()

        snapshot = page.snapshot()
        assert snapshot.fully_loading is False
        assert all(not state.loading for state in snapshot.sections.values())
        assert all(state.data is None for state in snapshot.sections.values())


class TestDashboardErrorIsolation:
    """A failing section never affects its siblings."""

    @pytest.mark.asyncio
    async def test_failure_stays_in_its_section(self, market) -> None:
        market.errors["get_market_overview"] = ApiResponseError("Failed to fetch market overview")
        page = DashboardPage(market)
        page.activate()
        await page.settle()

        snapshot = page.snapshot()
        assert snapshot.errors == {"market_overview": "Failed to fetch market overview"}
        assert snapshot.section("market_overview").data is None
        assert snapshot.section("stocks").data is not None
        assert snapshot.section("news").error is None
        page.deactivate()

    @pytest.mark.asyncio
    async def test_retry_recovers_only_that_section(self, market) -> None:
        market.errors["get_recent_news"] = ApiResponseError("Failed to fetch recent news")
        page = DashboardPage(market)
        page.activate()
        await page.settle()
        market.calls.clear()
        del market.errors["get_recent_news"]

        assert page.retry("news") is True
        await page.settle()

        assert [name for name, _ in market.calls] == ["get_recent_news"]
        assert page.snapshot().errors == {}
        assert page["news"].data is not None
        page.deactivate()

    @pytest.mark.asyncio
    async def test_unknown_section(self, market) -> None:
        page = DashboardPage(market)
        with pytest.raises(UnknownSectionError):
            page.retry("portfolio")
        with pytest.raises(UnknownSectionError):
            page.snapshot().section("portfolio")


class TestDashboardSelections:
    """Dependent sections follow the selected symbol and indicator."""

    @pytest.mark.asyncio
    async def test_symbol_selection_enables_detail(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        await page.settle()

        page.select_symbol("aapl")
        await page.settle()

        assert page["selected_stock"].key == ("AAPL",)
        assert page["selected_history"].key == ("AAPL", 24)
        assert page["selected_news"].key == ("AAPL", 24, 20)
        assert market.calls_to("get_stock_time_series") == [("AAPL", 24)]
        assert page["selected_history"].data.symbol == "AAPL"
        page.deactivate()

    @pytest.mark.asyncio
    async def test_switching_symbol_drops_previous_answers(self, market) -> None:
        gate = asyncio.Event()
        market.gates["get_stock_time_series"] = gate
        page = DashboardPage(market)
        page.activate()
        await page.settle()

        page.select_symbol("AAPL")
        await _drain()
        page.select_symbol("MSFT")
        await _drain()
        gate.set()
        await page.settle()

        assert market.calls_to("get_stock_time_series") == [("AAPL", 24), ("MSFT", 24)]
        assert page["selected_history"].data.symbol == "MSFT"
        assert page["selected_stock"].data.symbol == "MSFT"
        page.deactivate()

    @pytest.mark.asyncio
    async def test_clearing_symbol_disables_detail(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        page.select_symbol("AAPL")
        await page.settle()

        page.select_symbol(None)
        for name in ("selected_stock", "selected_history", "selected_news"):
            state = page[name].state
            assert state.enabled is False
            assert state.data is None
            assert state.loading is False
        assert page.symbol is None
        assert page["selected_stock"].polling is False
        page.deactivate()

    @pytest.mark.asyncio
    async def test_range_change_refetches_history_only(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        page.select_symbol("AAPL")
        await page.settle()
        market.calls.clear()

        page.select_range(168)
        await page.settle()

        assert market.calls == [("get_stock_time_series", ("AAPL", 168))]
        assert page.range_hours == 168
        page.deactivate()

    @pytest.mark.asyncio
    async def test_invalid_range_rejected(self, market) -> None:
        page = DashboardPage(market)
        with pytest.raises(InvalidTimeRangeError):
            page.select_range(48)
        assert page.range_hours == 24

    @pytest.mark.asyncio
    async def test_indicator_selection(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        page.select_indicator("CPI")
        await page.settle()

        assert market.calls_to("get_indicator_time_series") == [("CPI", 30)]
        assert page["indicator_history"].data[0].value == 3.1
        assert market.calls_to("get_indicator_summary") == [("CPI",)]
        assert page["indicator_summary"].data.indicator == "CPI"

        page.select_indicator(None)
        assert page["indicator_history"].state.enabled is False
        assert page["indicator_summary"].state.enabled is False
        page.deactivate()

    @pytest.mark.asyncio
    async def test_sentiment_selection(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        page.select_sentiment("negative")
        await page.settle()

        assert page.sentiment == "NEGATIVE"
        assert page["sentiment_news"].key == ("NEGATIVE", 24, 20)
        assert market.calls_to("get_news_by_sentiment") == [("NEGATIVE", 24, 20)]
        assert page["sentiment_news"].data == []

        page.select_sentiment(None)
        assert page["sentiment_news"].state.enabled is False
        page.deactivate()

    def test_unknown_sentiment_rejected(self, market) -> None:
        page = DashboardPage(market)
        with pytest.raises(ValueError):
            page.select_sentiment("MIXED")
        assert page.sentiment is None


class TestDashboardRefresh:
    """Manual refresh fans out to every enabled section."""

    @pytest.mark.asyncio
    async def test_refresh_skips_disabled_sections(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        await page.settle()
        market.calls.clear()

        refreshed = page.refresh()
        await page.settle()

        assert refreshed == INDEPENDENT_SECTIONS
        assert len(market.calls) == len(INDEPENDENT_SECTIONS)
        page.deactivate()

    @pytest.mark.asyncio
    async def test_refresh_includes_selected_sections(self, market) -> None:
        page = DashboardPage(market)
        page.activate()
        page.select_symbol("AAPL")
        await page.settle()

        refreshed = page.refresh()
        await page.settle()

        assert "selected_history" in refreshed
        assert "indicator_history" not in refreshed
        page.deactivate()

    @pytest.mark.asyncio
    async def test_page_listener_receives_section_names(self, market) -> None:
        page = DashboardPage(market)
        seen: list[str] = []
        page.subscribe(lambda section, _state: seen.append(section))
        page.activate()
        await page.settle()

        assert set(INDEPENDENT_SECTIONS) <= set(seen)
        page.deactivate()


class TestStocksPage:
    """Paginated stock listing."""

    @pytest.mark.asyncio
    async def test_paging(self, market) -> None:
        page = StocksPage(market)
        page.activate()
        await page.settle()

        page.select_page(2)
        await page.settle()

        assert market.calls_to("get_all_stock_summaries") == [(0, 50), (2, 50)]
        assert page["stocks"].data.page == 2
        assert page.selection() == {"page": 2, "size": 50}
        page.deactivate()

    def test_negative_page_rejected(self, market) -> None:
        page = StocksPage(market)
        with pytest.raises(ValueError):
            page.select_page(-1)


class TestStockDetailPage:
    """Detail page for a fixed symbol."""

    def test_blank_symbol_rejected(self, market) -> None:
        with pytest.raises(ValueError, match="Stock symbol not provided"):
            StockDetailPage(market, "  ")

    @pytest.mark.asyncio
    async def test_sections_keyed_by_symbol(self, market) -> None:
        async with StockDetailPage(market, "nvda") as page:
            await page.settle()
            assert market.calls_to("get_stock_summary") == [("NVDA",)]
            assert market.calls_to("get_stock_time_series") == [("NVDA", 24)]
            assert market.calls_to("get_news_for_symbol") == [("NVDA", 24, 20)]
            assert page.selection() == {"symbol": "NVDA", "range_hours": 24}

    @pytest.mark.asyncio
    async def test_range_change_keeps_previous_chart(self, market) -> None:
        async with StockDetailPage(market, "NVDA") as page:
            await page.settle()
            previous = page["history"].data

            page.select_range(6)
            state = page["history"].state
            assert state.data is previous
            assert state.loading is True

            await page.settle()
            assert page["history"].loading is False
            assert market.calls_to("get_stock_time_series")[-1] == ("NVDA", 6)


class TestStockDetailSession:
    """The one detail page a render tree has open."""

    @pytest.mark.asyncio
    async def test_open_mounts_page(self, market) -> None:
        session = StockDetailSession(market)
        page = await session.open("aapl")
        await page.settle()

        assert session.page is page
        assert page.active is True
        assert page.symbol == "AAPL"
        assert page["stock"].data.symbol == "AAPL"
        await session.close()

    @pytest.mark.asyncio
    async def test_same_symbol_reuses_page(self, market) -> None:
        session = StockDetailSession(market)
        first = await session.open("AAPL")
        second = await session.open(" aapl ")

        assert second is first
        await session.close()
        assert market.calls_to("get_stock_summary") == [("AAPL",)]

    @pytest.mark.asyncio
    async def test_switching_symbol_unmounts_previous(self, market) -> None:
        gate = asyncio.Event()
        market.gates["get_stock_time_series"] = gate
        session = StockDetailSession(market)
        first = await session.open("AAPL")
        await _drain()

        opening = asyncio.create_task(session.open("MSFT"))
        await _drain()
        assert first.active is False
        assert first["history"].loading is False
        assert opening.done() is False

        gate.set()
        second = await opening
        await second.settle()

        assert second.symbol == "MSFT"
        assert first["history"].data is None
        assert second["history"].data.symbol == "MSFT"
        await session.close()

    @pytest.mark.asyncio
    async def test_close_unmounts(self, market) -> None:
        session = StockDetailSession(market)
        page = await session.open("NVDA")
        await session.close()

        assert session.page is None
        assert page.active is False
        assert page.refresh() == []

    @pytest.mark.asyncio
    async def test_blank_symbol_rejected(self, market) -> None:
        session = StockDetailSession(market)
        with pytest.raises(ValueError, match="Stock symbol not provided"):
            await session.open("  ")
        assert session.page is None
