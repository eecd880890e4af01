"""Clock contract consumed by the search engine's time bound."""

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of elapsed time for a search session."""

    @abstractmethod
    def elapsed_millis(self) -> float:
        """Milliseconds elapsed since the session started."""
        pass


class MonotonicClock(Clock):
    """Clock backed by ``time.perf_counter``, started on construction."""

    def __init__(self):
        self._start = time.perf_counter()

    def elapsed_millis(self) -> float:
        return (time.perf_counter() - self._start) * 1000.0
