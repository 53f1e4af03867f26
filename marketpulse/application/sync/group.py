"""
Page-level composition of independent queries.

A ``QueryGroup`` owns the named sections of one screen. Each section is
a query with its own key, cadence, timer and error; the group only
adds what a screen needs on top:

- mount/unmount of every section at once,
- a manual refresh that fans out to every enabled section,
- per-section retry,
- the aggregate "fully loading" flag,
- a page-level change feed and an immutable snapshot for rendering.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from marketpulse.application.sync.query import Query, QueryState
from marketpulse.domain.market.errors import UnknownSectionError

logger = logging.getLogger(__name__)

PageListener = Callable[[str, QueryState], None]


@dataclass(frozen=True)
class PageSnapshot:
    """Everything a render tree needs to draw one screen."""

    name: str
    sections: dict[str, QueryState]
    fully_loading: bool
    selection: dict[str, Any] = field(default_factory=dict)

    def section(self, name: str) -> QueryState:
        try:
            return self.sections[name]
        except KeyError:
            raise UnknownSectionError(self.name, name) from None

    @property
    def errors(self) -> dict[str, str]:
        """Error message per failing section."""
        return {
            name: state.error.message
            for name, state in self.sections.items()
            if state.error is not None
        }


class QueryGroup:
    """Base class for pages composed of independently refreshed sections.

    Usage:
        class QuotesPage(QueryGroup):
            name = "quotes"

            def __init__(self, market):
                super().__init__()
                self.add("stocks", PollingQuery(market.get_all_stock_summaries, 30))

        async with QuotesPage(market) as page:
            page.snapshot()
    """

    name = "page"

    def __init__(self) -> None:
        self._sections: dict[str, Query] = {}
        self._listeners: list[PageListener] = []
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def sections(self) -> dict[str, Query]:
        return dict(self._sections)

    def add(self, section: str, query: Query) -> Query:
        """Register a query under a section name."""
        if section in self._sections:
            raise ValueError(f"Section {section!r} already exists on {self.name}")
        query.name = f"{self.name}.{section}"
        self._sections[section] = query
        query.subscribe(lambda state, _section=section: self._notify(_section, state))
        if self._active:
            query.activate()
        return query

    def __getitem__(self, section: str) -> Query:
        try:
            return self._sections[section]
        except KeyError:
            raise UnknownSectionError(self.name, section) from None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> None:
        if self._active:
            return
        self._active = True
        for query in self._sections.values():
            query.activate()
        logger.info("Page %s mounted with %d sections", self.name, len(self._sections))

    def deactivate(self) -> None:
        if not self._active:
            return
        self._active = False
        for query in self._sections.values():
            query.deactivate()
        logger.info("Page %s unmounted", self.name)

    async def settle(self) -> None:
        """Wait until every section's in-flight fetches have finished."""
        await asyncio.gather(*(q.settle() for q in self._sections.values()))

    async def __aenter__(self) -> "QueryGroup":
        self.activate()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.deactivate()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def refresh(self) -> list[str]:
        """Refetch every enabled section, independent of their timers.

        Returns:
            Names of the sections that issued a fetch.
        """
        refreshed = [name for name, query in self._sections.items() if query.refetch()]
        logger.info("Page %s manual refresh: %s", self.name, refreshed)
        return refreshed

    def retry(self, section: str) -> bool:
        """Refetch a single section. Other sections are left untouched."""
        return self[section].refetch()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def fully_loading(self) -> bool:
        """True while every enabled section is on its first load and none has data."""
        states = [query.state for query in self._sections.values()]
        enabled = [state for state in states if state.enabled]
        if not enabled:
            return False
        return all(state.loading for state in enabled) and not any(
            state.data is not None for state in states
        )

    def selection(self) -> dict[str, Any]:
        """Current user selections driving dependent sections."""
        return {}

    def snapshot(self) -> PageSnapshot:
        return PageSnapshot(
            name=self.name,
            sections={name: query.state for name, query in self._sections.items()},
            fully_loading=self.fully_loading,
            selection=self.selection(),
        )

    def subscribe(self, listener: PageListener) -> Callable[[], None]:
        """Register a listener called with (section, state) on every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, section: str, state: QueryState) -> None:
        for listener in list(self._listeners):
            try:
                listener(section, state)
            except Exception:
                logger.exception("Listener of page %s failed", self.name)
