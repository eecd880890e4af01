"""Search statistics and the metrics sink contract.

The engine keeps a ``SearchStatistics`` per session and, when given a
``MetricsSink``, pushes a ``SearchMetrics`` snapshot after every extraction
and insertion. Sinks are for reporting only; nothing they do feeds back into
the search.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchMetrics:
    """Point-in-time view of the open/closed lists."""
    nodes_opened: int
    nodes_reopened: int
    open_list_max_len: int
    closed_list_size: int
    open_list_size: int


class MetricsSink(ABC):
    """Receiver of metric snapshots during a search."""

    @abstractmethod
    def update(self, metrics: SearchMetrics) -> None:
        pass


class RecordingMetricsSink(MetricsSink):
    """Keeps every snapshot in memory."""

    def __init__(self):
        self.snapshots: List[SearchMetrics] = []

    def update(self, metrics: SearchMetrics) -> None:
        self.snapshots.append(metrics)

    @property
    def latest(self) -> Optional[SearchMetrics]:
        return self.snapshots[-1] if self.snapshots else None


class LoggingMetricsSink(MetricsSink):
    """Logs every ``interval``-th snapshot at debug level."""

    def __init__(self, interval: int = 100, log: Optional[logging.Logger] = None):
        if interval < 1:
            raise ValueError(f"interval must be >= 1, got {interval}")
        self.interval = interval
        self.log = log or logger
        self.updates = 0

    def update(self, metrics: SearchMetrics) -> None:
        self.updates += 1
        if self.updates % self.interval == 0:
            self.log.debug(
                f"opened={metrics.nodes_opened} reopened={metrics.nodes_reopened} "
                f"open={metrics.open_list_size} closed={metrics.closed_list_size} "
                f"max_open={metrics.open_list_max_len}"
            )


@dataclass
class SearchStatistics:
    """Counters for one search session."""
    nodes_opened: int = 0  # extractions from the open list
    nodes_reopened: int = 0  # closed states moved back to the open list
    nodes_closed: int = 0  # closed list size when the search ended
    nodes_generated: int = 0
    nodes_discarded: int = 0  # successors dominated by an existing node
    nodes_replaced: int = 0  # open nodes superseded by a cheaper path
    open_list_size: int = 0
    closed_list_size: int = 0
    open_list_max_len: int = 0
    min_open_closed_ratio: Optional[float] = None
    max_open_closed_ratio: Optional[float] = None
    solution_length: Optional[int] = None

    def observe_lists(self, open_size: int, closed_size: int) -> None:
        """Record current list sizes and fold them into the running extremes."""
        self.open_list_size = open_size
        self.closed_list_size = closed_size
        if open_size > self.open_list_max_len:
            self.open_list_max_len = open_size

        if closed_size == 0:
            ratio = 1.0 if open_size == 0 else float(open_size)
        else:
            ratio = open_size / closed_size

        if self.max_open_closed_ratio is None or ratio > self.max_open_closed_ratio:
            self.max_open_closed_ratio = ratio
        if self.min_open_closed_ratio is None or ratio < self.min_open_closed_ratio:
            self.min_open_closed_ratio = ratio

    def snapshot(self) -> SearchMetrics:
        return SearchMetrics(
            nodes_opened=self.nodes_opened,
            nodes_reopened=self.nodes_reopened,
            open_list_max_len=self.open_list_max_len,
            closed_list_size=self.closed_list_size,
            open_list_size=self.open_list_size
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary."""
        return asdict(self)
