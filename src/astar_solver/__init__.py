"""Generic A* search engine with an indexed priority-queue open list."""

from .core import PuzzleState, SearchNode, Bound, ContractViolation, CapacityExceeded, TimedOut
from .search import AStarSearcher, SearchConfig, SearchOutcome, SearchResult, TieBreak, search

__version__ = "0.1.0"

__all__ = [
    'PuzzleState',
    'SearchNode',
    'Bound',
    'ContractViolation',
    'CapacityExceeded',
    'TimedOut',
    'AStarSearcher',
    'SearchConfig',
    'SearchOutcome',
    'SearchResult',
    'TieBreak',
    'search'
]
