"""Search algorithms for the A* solver.

This module implements A* search with duplicate detection and reopening on
top of an indexed binary min-heap open list.
"""

from .indexed_heap import IndexedPriorityQueue, TieBreak
from .closed_set import ClosedSet
from .clock import Clock, MonotonicClock
from .metrics import (
    SearchMetrics, MetricsSink, RecordingMetricsSink, LoggingMetricsSink, SearchStatistics
)
from .astar import (
    AStarSearcher, SearchConfig, SearchOutcome, SearchResult, SearchSession,
    search, create_astar_searcher
)

__all__ = [
    'IndexedPriorityQueue',
    'TieBreak',
    'ClosedSet',
    'Clock',
    'MonotonicClock',
    'SearchMetrics',
    'MetricsSink',
    'RecordingMetricsSink',
    'LoggingMetricsSink',
    'SearchStatistics',
    'AStarSearcher',
    'SearchConfig',
    'SearchOutcome',
    'SearchResult',
    'SearchSession',
    'search',
    'create_astar_searcher'
]
