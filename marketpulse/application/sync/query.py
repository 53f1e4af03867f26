"""
Query state and the lifecycle shared by one-shot and polling queries.

A query binds an async fetcher to a QueryKey and publishes a
``QueryState`` snapshot that a render tree can read or subscribe to.
The fetcher is called with the key's elements as positional arguments.

Supersession is enforced with two counters owned by each query:

- **generation**: bumped on every key change and on deactivation.
  A fetch captures the generation it was issued under; if the
  generation has moved on when it completes, the result is dropped.
- **request sequence**: bumped on every issued fetch. Within one
  generation a completion is only applied if no newer request has
  already been applied (last writer wins).

Cancellation is advisory: a superseded request is never aborted, its
result is simply discarded on arrival.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Hashable, Optional, TypeVar

from marketpulse.domain.market.errors import MarketDataError

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryKey = tuple[Hashable, ...]
Fetcher = Callable[..., Awaitable[Any]]

DEFAULT_ERROR_MESSAGE = "An error occurred"


@dataclass(frozen=True)
class ErrorInfo:
    """Flattened, human-readable description of a failed fetch."""

    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        if isinstance(exc, MarketDataError) and exc.message:
            return cls(exc.message)
        return cls(str(exc) or DEFAULT_ERROR_MESSAGE)


@dataclass(frozen=True)
class QueryState(Generic[T]):
    """Immutable view of a query, replaced on every real change.

    Attributes:
        data: Last value resolved for the current key, if any.
        loading: True while a request the UI should wait on is outstanding.
        error: Failure of the most recent applied request, if it failed.
        key: The current QueryKey. None when the query has no subject.
    """

    data: Optional[T] = None
    loading: bool = False
    error: Optional[ErrorInfo] = None
    key: Optional[QueryKey] = None

    @property
    def enabled(self) -> bool:
        return self.key is not None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None


Listener = Callable[[QueryState], None]


def normalize_key(key: Any) -> Optional[QueryKey]:
    """Coerce a key to a tuple. None stays None (disabled)."""
    if key is None:
        return None
    if isinstance(key, tuple):
        return key
    if isinstance(key, list):
        return tuple(key)
    return (key,)


def dependent_key(selector: Any, *rest: Hashable) -> Optional[QueryKey]:
    """Build the key of a query that depends on a user selection.

    Returns None while the selector is empty so the query stays idle.

    >>> dependent_key("AAPL", 24)
    ('AAPL', 24)
    >>> dependent_key(None, 24) is None
    True
    """
    if selector is None or selector == "":
        return None
    return (selector, *rest)


class Query(Generic[T]):
    """Base lifecycle for a keyed asynchronous query.

    Subclasses decide how completions translate into state
    (``_succeeded``, ``_failed``, ``_on_refetch``) and may own a
    schedule (``_start_schedule``, ``_release``).

    Queries must be activated from inside the running event loop.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        key: Any = (),
        *,
        name: Optional[str] = None,
        keep_previous_data: bool = False,
    ) -> None:
        self._fetcher = fetcher
        self._key = normalize_key(key)
        self.name = name or getattr(fetcher, "__name__", type(self).__name__)
        self._keep_previous_data = keep_previous_data
        self._state: QueryState[T] = QueryState(key=self._key)
        self._active = False
        self._generation = 0
        self._issued = 0
        self._applied = 0
        self._inflight: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> QueryState[T]:
        return self._state

    @property
    def data(self) -> Optional[T]:
        return self._state.data

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[ErrorInfo]:
        return self._state.error

    @property
    def key(self) -> Optional[QueryKey]:
        return self._key

    @property
    def active(self) -> bool:
        return self._active

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> int:
        """Number of fetch tasks that have not finished yet."""
        return len(self._inflight)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Start the query for its current key. No-op if already active."""
        if self._active:
            return
        self._active = True
        logger.debug("Query %s activated (key=%s)", self.name, self._key)
        self._begin()

    def deactivate(self) -> None:
        """Stop the query. Late results from earlier requests are dropped.

        Nothing is outstanding for the current key any more, so ``loading``
        is cleared; ``data`` and ``error`` are kept as they were.
        """
        if not self._active:
            return
        self._active = False
        self._generation += 1
        self._release()
        self._set_state(
            QueryState(data=self._state.data, error=self._state.error, key=self._key)
        )
        logger.debug("Query %s deactivated", self.name)

    def set_key(self, key: Any) -> None:
        """Switch to a new key, tearing down the previous lifecycle first.

        Setting an equal key is a no-op. Setting None disables the query.
        """
        key = normalize_key(key)
        if key == self._key:
            return
        logger.debug("Query %s key change %s -> %s", self.name, self._key, key)
        self._key = key
        self._generation += 1
        self._release()
        if self._active:
            self._begin()
        else:
            self._set_state(QueryState(key=key))

    def refetch(self) -> bool:
        """Re-issue the fetch for the current key.

        Returns:
            False when the query is inactive or has no subject, True otherwise.
        """
        if not self._active or self._key is None:
            return False
        self._on_refetch()
        self._issue()
        return True

    async def settle(self) -> None:
        """Wait until every fetch issued so far has finished."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def __aenter__(self) -> "Query[T]":
        self.activate()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.deactivate()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new state.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def _start_schedule(self) -> None:
        """Start recurring work for the current generation."""

    def _release(self) -> None:
        """Release recurring work owned by the previous generation."""

    def _on_refetch(self) -> None:
        raise NotImplementedError

    def _succeeded(self, seq: int, result: T) -> QueryState[T]:
        raise NotImplementedError

    def _failed(self, seq: int, error: ErrorInfo) -> QueryState[T]:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin(self) -> None:
        if self._key is None:
            self._set_state(QueryState(key=None))
            return
        previous = self._state.data if self._keep_previous_data else None
        self._set_state(QueryState(data=previous, loading=True, key=self._key))
        self._issue()
        self._start_schedule()

    def _issue(self) -> None:
        self._issued += 1
        seq = self._issued
        task = asyncio.create_task(
            self._run(self._generation, seq, self._key),
            name=f"query:{self.name}:{seq}",
        )
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, generation: int, seq: int, key: QueryKey) -> None:
        # Superseded before the task got scheduled: never call the fetcher.
        if not self._is_live(generation):
            return
        try:
            result = await self._fetcher(*key)
        except Exception as exc:
            if not self._is_current(generation, seq):
                logger.debug("Query %s dropped stale failure for key=%s", self.name, key)
                return
            logger.warning("Query %s failed for key=%s: %s", self.name, key, exc)
            self._applied = seq
            self._set_state(self._failed(seq, ErrorInfo.from_exception(exc)))
            return

        if not self._is_current(generation, seq):
            logger.debug("Query %s dropped stale result for key=%s", self.name, key)
            return
        self._applied = seq
        self._set_state(self._succeeded(seq, result))

    def _is_live(self, generation: int) -> bool:
        return self._active and generation == self._generation

    def _is_current(self, generation: int, seq: int) -> bool:
        return self._is_live(generation) and seq > self._applied

    def _has_newer_request(self, seq: int) -> bool:
        return seq < self._issued

    def _set_state(self, state: QueryState[T]) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Listener of query %s failed", self.name)
