"""Core data models for the search engine.

``PuzzleState`` is the contract every searchable configuration implements;
``SearchNode`` is the engine-owned wrapper that carries cost bookkeeping.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from astar_solver.core.exceptions import ContractViolation


class PuzzleState(ABC):
    """A single configuration of a puzzle.

    Subclasses must be immutable and define ``__eq__``/``__hash__`` over
    their domain fields only. Cost and heuristic values never take part in
    identity.

    A state does not know its own distance from the start: g belongs to the
    ``SearchNode`` wrapping it, since the same state can be reached along
    paths of different cost.

    Setting ``monotonic = True`` (on the class or on an instance at
    construction) declares the heuristic consistent. The engine reads the tag
    once from the start state and then skips reopening entirely; a wrong tag
    costs optimality, not correctness of the search loop.
    """

    monotonic: bool = False

    @abstractmethod
    def children(self) -> Iterable['PuzzleState']:
        """Return the successor states of this state.

        The result is consumed exactly once, so a generator is fine.
        """
        pass

    @abstractmethod
    def heuristic(self) -> float:
        """Estimated remaining cost h(s) from this state to the goal."""
        pass

    def edge_cost(self, child: 'PuzzleState') -> float:
        """Cost of the move from this state to ``child``."""
        return 1.0


@dataclass(eq=False)
class SearchNode:
    """Node in the A* search tree.

    ``g`` is frozen when the node is built. A cheaper path to the same state
    always produces a new node; existing nodes and their children are never
    re-parented.
    """
    state: PuzzleState
    g: float = 0.0  # cost from start along the generating path
    parent: Optional['SearchNode'] = None
    depth: int = 0
    h: float = field(init=False)

    def __post_init__(self):
        """Validate costs and cache the heuristic estimate."""
        if self.state is None:
            raise ContractViolation("SearchNode requires a state, got None")
        if self.g < 0:
            raise ContractViolation(f"Cost from start must be >= 0, got {self.g}")
        self.h = float(self.state.heuristic())

    @classmethod
    def root(cls, state: PuzzleState) -> 'SearchNode':
        """Create the start node of a search (g = 0, no parent)."""
        return cls(state=state, g=0.0)

    def child(self, state: PuzzleState) -> 'SearchNode':
        """Wrap a successor of this node's state."""
        cost = self.state.edge_cost(state)
        if cost < 0:
            raise ContractViolation(
                f"Edge costs must be non-negative, got {cost} for {self.state!r} -> {state!r}"
            )
        return SearchNode(state=state, g=self.g + cost, parent=self, depth=self.depth + 1)

    @property
    def f(self) -> float:
        """Total estimated cost f(n) = g(n) + h(n)."""
        return self.g + self.h

    def path(self) -> List[PuzzleState]:
        """States from this node back to the root (goal -> start)."""
        states = []
        node = self
        while node is not None:
            states.append(node.state)
            node = node.parent
        return states

    def __repr__(self) -> str:
        return f"SearchNode(state={self.state!r}, g={self.g}, h={self.h}, depth={self.depth})"
