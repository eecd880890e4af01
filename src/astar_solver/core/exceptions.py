"""Error taxonomy for the search engine.

``ContractViolation`` and ``EmptyCollection`` signal programming errors and
propagate out of a search. ``CapacityExceeded`` and ``TimedOut`` are expected,
user-controlled limits: the engine turns them into a terminal ``SearchResult``.
"""

from enum import Enum


class Bound(Enum):
    """Resource bounds a search session can run into."""
    OPEN_LIST = "open_list"
    TOTAL_NODES = "total_nodes"
    EXPANSIONS = "expansions"


class SearchError(Exception):
    """Base class for all search engine errors."""
    pass


class ContractViolation(SearchError):
    """A broken invariant: null node, unknown identity, index desynchronisation."""
    pass


class EmptyCollection(SearchError):
    """Raised when reading the minimum of an empty priority queue."""
    pass


class CapacityExceeded(SearchError):
    """A configured size bound was exceeded."""

    def __init__(self, bound: Bound, limit: int, count: int):
        self.bound = bound
        self.limit = limit
        self.count = count
        super().__init__(
            f"{bound.value} bound exceeded. Set to: {limit}, current count: {count}"
        )


class TimedOut(SearchError):
    """The session's time budget ran out between two expansions."""

    def __init__(self, limit_ms: float, elapsed_ms: float):
        self.limit_ms = limit_ms
        self.elapsed_ms = elapsed_ms
        super().__init__(
            f"Search timed out after {elapsed_ms:.1f}ms (limit {limit_ms}ms)"
        )
