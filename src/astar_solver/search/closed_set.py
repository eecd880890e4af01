"""Closed list for A* search: expanded states keyed by identity."""

from typing import Dict, Iterator

from astar_solver.core.data_models import PuzzleState, SearchNode
from astar_solver.core.exceptions import ContractViolation


class ClosedSet:
    """Identity-keyed map of expanded nodes. All operations are O(1) amortized."""

    def __init__(self):
        self._nodes: Dict[PuzzleState, SearchNode] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, state: PuzzleState) -> bool:
        return state in self._nodes

    def __iter__(self) -> Iterator[SearchNode]:
        return iter(self._nodes.values())

    def contains(self, state: PuzzleState) -> bool:
        return state in self._nodes

    def add(self, node: SearchNode) -> None:
        """Record an expanded node.

        Raises:
            ContractViolation: If the node is None or its state is already closed
        """
        if node is None:
            raise ContractViolation("ClosedSet.add: node cannot be None")
        if node.state in self._nodes:
            raise ContractViolation(f"State already on the closed list: {node.state!r}")
        self._nodes[node.state] = node

    def get(self, state: PuzzleState) -> SearchNode:
        try:
            return self._nodes[state]
        except KeyError:
            raise ContractViolation(f"State not on the closed list: {state!r}") from None

    def remove(self, state: PuzzleState) -> SearchNode:
        """Drop a state from the closed list, returning its node."""
        try:
            return self._nodes.pop(state)
        except KeyError:
            raise ContractViolation(f"State not on the closed list: {state!r}") from None
