"""
Polling query: fetch immediately, then on a fixed interval.

Each polling query owns exactly one timer task for its current
generation. The timer is cancelled on deactivation and on every key
change, so no tick of a previous lifecycle can fire afterwards.

Ticks follow a fixed grid measured from activation
(``t0 + n * interval``), not from request completion: a slow request
never delays the next tick. If the event loop falls behind by more
than one interval, the missed ticks are coalesced into one.
"""

import asyncio
import logging
from typing import Any, Optional, TypeVar

from marketpulse.application.sync.query import ErrorInfo, Fetcher, Query, QueryState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PollingQuery(Query[T]):
    """Keeps the last good value visible while refreshing in the background.

    ``loading`` is only True until the first completion after activation
    or a key change. Later ticks update ``data`` and ``error`` silently:
    a failed tick keeps the last good ``data`` and sets ``error``, the
    next successful tick clears it.

    Args:
        fetcher: Coroutine function called with the key's elements.
        interval: Seconds between two scheduled fetches.
        key: Initial QueryKey. None keeps the query idle.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        interval: float,
        key: Any = (),
        *,
        name: Optional[str] = None,
        keep_previous_data: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        super().__init__(fetcher, key, name=name, keep_previous_data=keep_previous_data)
        self.interval = interval
        self._timer: Optional[asyncio.Task] = None

    @property
    def polling(self) -> bool:
        """Whether a timer task is currently scheduled."""
        return self._timer is not None and not self._timer.done()

    def _start_schedule(self) -> None:
        self._timer = asyncio.create_task(
            self._tick_loop(self._generation), name=f"poll:{self.name}"
        )

    def _release(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _tick_loop(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval
        while self._is_live(generation):
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            if not self._is_live(generation):
                return
            self._issue()
            next_at += self.interval
            now = loop.time()
            if next_at <= now:
                missed = int((now - next_at) // self.interval) + 1
                next_at += missed * self.interval
                logger.warning(
                    "Polling %s fell behind; coalesced %d missed tick(s)",
                    self.name,
                    missed,
                )

    def _on_refetch(self) -> None:
        # Out-of-cycle fetch: the schedule and loading flag are left alone.
        pass

    def _succeeded(self, seq: int, result: T) -> QueryState[T]:
        return QueryState(data=result, loading=False, error=None, key=self._key)

    def _failed(self, seq: int, error: ErrorInfo) -> QueryState[T]:
        return QueryState(
            data=self._state.data, loading=False, error=error, key=self._key
        )
