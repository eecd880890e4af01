"""Core data models and error types."""

from .data_models import PuzzleState, SearchNode
from .exceptions import (
    Bound, SearchError, ContractViolation, EmptyCollection, CapacityExceeded, TimedOut
)

__all__ = [
    'PuzzleState',
    'SearchNode',
    'Bound',
    'SearchError',
    'ContractViolation',
    'EmptyCollection',
    'CapacityExceeded',
    'TimedOut'
]
