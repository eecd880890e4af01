"""Indexed binary min-heap used as the A* open list.

The heap lives in a Python list; a dict maps every queued state to its
current slot so membership tests and lookups run in O(1) while insertion,
extraction and arbitrary removal stay O(log n).
"""

import itertools
import sys
from enum import Enum
from typing import Dict, List, Tuple

from astar_solver.core.data_models import PuzzleState, SearchNode
from astar_solver.core.exceptions import Bound, CapacityExceeded, ContractViolation, EmptyCollection

_ROOT = 0


class TieBreak(Enum):
    """Secondary ordering for nodes with equal f."""
    NONE = "none"  # order falls out of heap shape and insertion order
    FIFO = "fifo"  # earlier insertions first
    LIFO = "lifo"  # later insertions first


class HeapEntry:
    """A queued node together with its ordering key."""

    __slots__ = ('key', 'node')

    def __init__(self, key: Tuple, node: SearchNode):
        self.key = key
        self.node = node


class IndexedPriorityQueue:
    """Min-heap of search nodes ordered by f, indexed by state identity."""

    def __init__(self, open_list_bound: int = sys.maxsize, tie_break: TieBreak = TieBreak.NONE):
        """Initialize an empty queue.

        Args:
            open_list_bound: Maximum number of queued nodes
            tie_break: Ordering among nodes with equal f
        """
        self.open_list_bound = open_list_bound
        self.tie_break = tie_break
        self._heap: List[HeapEntry] = []
        self._index: Dict[PuzzleState, int] = {}
        self._sequence = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, state: PuzzleState) -> bool:
        return self.contains(state)

    def size(self) -> int:
        """Number of queued nodes."""
        return len(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def contains(self, state: PuzzleState) -> bool:
        """Check whether a node for ``state`` is queued."""
        if state is None:
            raise ContractViolation("IndexedPriorityQueue.contains: state cannot be None")
        return state in self._index

    def get(self, state: PuzzleState) -> SearchNode:
        """Return the queued node for ``state``."""
        return self._heap[self.position(state)].node

    def position(self, state: PuzzleState) -> int:
        """Return the heap slot currently holding ``state``."""
        if state is None:
            raise ContractViolation("IndexedPriorityQueue.position: state cannot be None")
        try:
            return self._index[state]
        except KeyError:
            raise ContractViolation(f"State not in open list: {state!r}") from None

    def insert(self, node: SearchNode) -> None:
        """Insert a node, keeping heap order.

        Raises:
            ContractViolation: If node is None or its state is already queued
            CapacityExceeded: If the queue would grow past its bound
        """
        if node is None:
            raise ContractViolation("IndexedPriorityQueue.insert: node cannot be None")
        if node.state in self._index:
            raise ContractViolation(f"State already in open list: {node.state!r}")
        if len(self._heap) + 1 > self.open_list_bound:
            raise CapacityExceeded(Bound.OPEN_LIST, self.open_list_bound, len(self._heap) + 1)

        slot = len(self._heap)
        self._heap.append(HeapEntry(self._make_key(node), node))
        self._index[node.state] = slot
        self._sift_up(slot)

    def peek_min(self) -> SearchNode:
        """Return the node with the smallest f without removing it."""
        if not self._heap:
            raise EmptyCollection("Cannot peek into an empty open list")
        return self._heap[_ROOT].node

    def extract_min(self) -> SearchNode:
        """Remove and return the node with the smallest f."""
        if not self._heap:
            raise EmptyCollection("Cannot extract from an empty open list")

        first = self._heap[_ROOT]
        last = self._heap.pop()
        del self._index[first.node.state]

        if self._heap:
            self._heap[_ROOT] = last
            self._index[last.node.state] = _ROOT
            self._sift_down(_ROOT)

        return first.node

    def remove(self, state: PuzzleState) -> SearchNode:
        """Remove and return the queued node for ``state``."""
        slot = self.position(state)
        removed = self._heap[slot]
        last = self._heap.pop()
        del self._index[state]

        if slot < len(self._heap):
            # The old last entry fills the hole and may need to move either way.
            self._heap[slot] = last
            self._index[last.node.state] = slot
            if slot > _ROOT and last.key < self._heap[self._parent(slot)].key:
                self._sift_up(slot)
            else:
                self._sift_down(slot)

        return removed.node

    def nodes(self) -> List[SearchNode]:
        """Snapshot of the queued nodes in heap-array order."""
        return [entry.node for entry in self._heap]

    def validate(self) -> None:
        """Check heap order and index consistency.

        Raises:
            ContractViolation: If the heap and the index disagree
        """
        if len(self._index) != len(self._heap):
            raise ContractViolation(
                f"Index holds {len(self._index)} states but heap holds {len(self._heap)} nodes"
            )
        for slot, entry in enumerate(self._heap):
            if self._index.get(entry.node.state) != slot:
                raise ContractViolation(
                    f"Index desynchronised at slot {slot} for {entry.node.state!r}"
                )
            if slot > _ROOT and entry.key < self._heap[self._parent(slot)].key:
                raise ContractViolation(f"Heap order violated at slot {slot}")

    def _make_key(self, node: SearchNode) -> Tuple:
        if self.tie_break is TieBreak.FIFO:
            return (node.f, next(self._sequence))
        if self.tie_break is TieBreak.LIFO:
            return (node.f, -next(self._sequence))
        return (node.f,)

    @staticmethod
    def _parent(i: int) -> int:
        return (i - 1) // 2

    def _swap(self, a: int, b: int) -> None:
        """Swap two slots in the heap and the index together."""
        entry_a = self._heap[a]
        entry_b = self._heap[b]
        self._heap[a] = entry_b
        self._heap[b] = entry_a
        self._index[entry_b.node.state] = a
        self._index[entry_a.node.state] = b

    def _sift_up(self, i: int) -> None:
        while i > _ROOT:
            parent = self._parent(i)
            if not self._heap[i].key < self._heap[parent].key:
                break
            self._swap(i, parent)
            i = parent

    def _sift_down(self, i: int) -> None:
        size = len(self._heap)
        while True:
            left = 2 * i + 1
            right = left + 1
            smallest = i
            if left < size and self._heap[left].key < self._heap[smallest].key:
                smallest = left
            if right < size and self._heap[right].key < self._heap[smallest].key:
                smallest = right
            if smallest == i:
                return
            self._swap(i, smallest)
            i = smallest
