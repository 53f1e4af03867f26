"""
Data-synchronization layer.

Provides:
- **OneShotQuery**: fetches once per key change, refetch on demand.
- **PollingQuery**: fetches immediately, then on a fixed interval.
- **QueryGroup**: composes named queries into one page with a single
  refresh action and an aggregate loading flag.
"""

from marketpulse.application.sync.group import PageSnapshot, QueryGroup
from marketpulse.application.sync.one_shot import OneShotQuery
from marketpulse.application.sync.polling import PollingQuery
from marketpulse.application.sync.query import (
    ErrorInfo,
    Query,
    QueryKey,
    QueryState,
    dependent_key,
)

__all__ = [
    "ErrorInfo",
    "OneShotQuery",
    "PageSnapshot",
    "PollingQuery",
    "Query",
    "QueryGroup",
    "QueryKey",
    "QueryState",
    "dependent_key",
]
