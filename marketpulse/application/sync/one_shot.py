"""
One-shot query: fetch once per key, again only on explicit refetch.
"""

from typing import TypeVar

from marketpulse.application.sync.query import ErrorInfo, Query, QueryState

T = TypeVar("T")


class OneShotQuery(Query[T]):
    """Runs its fetcher once on activation and on every key change.

    ``loading`` stays True until the newest request for the current key
    completes. A failure clears ``data``; a refetch clears ``error``.

    Usage:
        history = OneShotQuery(client.get_stock_time_series, ("AAPL", 24))
        async with history:
            ...
            history.set_key(("AAPL", 72))
    """

    def _on_refetch(self) -> None:
        self._set_state(
            QueryState(data=self._state.data, loading=True, error=None, key=self._key)
        )

    def _succeeded(self, seq: int, result: T) -> QueryState[T]:
        return QueryState(
            data=result,
            loading=self._has_newer_request(seq),
            error=None,
            key=self._key,
        )

    def _failed(self, seq: int, error: ErrorInfo) -> QueryState[T]:
        return QueryState(
            data=None,
            loading=self._has_newer_request(seq),
            error=error,
            key=self._key,
        )
