"""A* search engine.

This module implements best-first A* search over any ``PuzzleState``
implementation. The open list is an ``IndexedPriorityQueue`` so a cheaper path
to a queued state can replace the queued node in O(log n); expanded nodes move
to a ``ClosedSet`` and may be reopened when the heuristic is not monotonic.

Every call to ``AStarSearcher.search`` builds its own ``SearchSession``; no
state survives between calls.
"""

import logging
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from omegaconf import DictConfig, OmegaConf

from astar_solver.config import get_config, load_config
from astar_solver.core.data_models import PuzzleState, SearchNode
from astar_solver.core.exceptions import Bound, CapacityExceeded, ContractViolation, TimedOut
from astar_solver.search.closed_set import ClosedSet
from astar_solver.search.clock import Clock, MonotonicClock
from astar_solver.search.indexed_heap import IndexedPriorityQueue, TieBreak
from astar_solver.search.metrics import MetricsSink, SearchStatistics

logger = logging.getLogger(__name__)

UNBOUNDED = sys.maxsize

_BOUND_FIELDS = ('open_list_bound', 'total_nodes_bound', 'time_bound_ms', 'max_expansions')
_FLAG_FIELDS = ('report_state_path', 'validate_invariants')


class SearchOutcome(Enum):
    """Terminal states of a search session."""
    GOAL_FOUND = "goal_found"
    NO_PATH = "no_path"
    TIMED_OUT = "timed_out"
    CAPACITY_EXCEEDED = "capacity_exceeded"


@dataclass
class SearchConfig:
    """Configuration for A* search."""
    open_list_bound: int = UNBOUNDED
    total_nodes_bound: int = UNBOUNDED  # open + closed
    time_bound_ms: float = UNBOUNDED
    max_expansions: int = UNBOUNDED  # guards against endless reopening
    tie_break: TieBreak = TieBreak.NONE
    report_state_path: bool = False  # log every expanded and generated state
    validate_invariants: bool = False  # check list invariants after each expansion

    def __post_init__(self):
        if isinstance(self.tie_break, str):
            self.tie_break = TieBreak(self.tie_break.lower())
        for name in _BOUND_FIELDS:
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    @classmethod
    def from_config(cls, cfg: DictConfig) -> 'SearchConfig':
        """Build a search configuration from the ``search.astar`` group.

        Null bounds mean unbounded.
        """
        astar_cfg = OmegaConf.select(cfg, 'search.astar', default=None)
        if astar_cfg is None:
            return cls()

        kwargs = {}
        for name in _BOUND_FIELDS:
            value = astar_cfg.get(name, None)
            if value is not None:
                kwargs[name] = value
        tie_break = astar_cfg.get('tie_break', None)
        if tie_break is not None:
            kwargs['tie_break'] = TieBreak(str(tie_break).lower())
        for name in _FLAG_FIELDS:
            if name in astar_cfg:
                kwargs[name] = bool(astar_cfg[name])

        return cls(**kwargs)

    @classmethod
    def load(cls, overrides: Optional[List[str]] = None,
             config_dir: Optional[str] = None) -> 'SearchConfig':
        """Compose and validate the Hydra configuration, then map ``search.astar``.

        Args:
            overrides: Hydra overrides, e.g. ``search.astar.total_nodes_bound=5000``
            config_dir: Config directory (the repository's ``conf`` if omitted)

        Returns:
            SearchConfig built from the composed configuration
        """
        return cls.from_config(load_config(overrides=overrides, config_dir=config_dir))

    @classmethod
    def from_global_config(cls) -> 'SearchConfig':
        """Use the loaded Hydra configuration if there is one, defaults otherwise."""
        cfg = get_config()
        if cfg is None:
            return cls()
        return cls.from_config(cfg)


@dataclass
class SearchResult:
    """Result from A* search."""
    outcome: SearchOutcome
    path: Optional[List[PuzzleState]] = None  # goal -> start
    cost: Optional[float] = None
    exceeded_bound: Optional[Bound] = None
    statistics: SearchStatistics = field(default_factory=SearchStatistics)
    computation_time: float = 0.0
    message: str = ""

    @property
    def success(self) -> bool:
        return self.outcome is SearchOutcome.GOAL_FOUND

    @property
    def solution_length(self) -> Optional[int]:
        """Number of moves in the solution path."""
        if self.path is None:
            return None
        return len(self.path) - 1

    def start_to_goal(self) -> List[PuzzleState]:
        """The solution path ordered start -> goal (empty if none)."""
        if self.path is None:
            return []
        return list(reversed(self.path))


class SearchSession:
    """Open list, closed set, counters and bounds for a single search call."""

    def __init__(self, start: PuzzleState, goal: PuzzleState, config: SearchConfig,
                 clock: Clock, metrics: Optional[MetricsSink] = None):
        self.start = start
        self.goal = goal
        self.config = config
        self.monotonic = bool(getattr(start, 'monotonic', False))
        self.open_list = IndexedPriorityQueue(config.open_list_bound, config.tie_break)
        self.closed_set = ClosedSet()
        self.statistics = SearchStatistics()
        self.clock = clock
        self.metrics = metrics

    def check_time(self) -> None:
        elapsed = self.clock.elapsed_millis()
        if elapsed > self.config.time_bound_ms:
            raise TimedOut(self.config.time_bound_ms, elapsed)

    def check_expansions(self) -> None:
        opened = self.statistics.nodes_opened
        if opened >= self.config.max_expansions:
            raise CapacityExceeded(Bound.EXPANSIONS, self.config.max_expansions, opened + 1)

    def check_total_nodes(self) -> None:
        total = len(self.open_list) + len(self.closed_set)
        if total > self.config.total_nodes_bound:
            raise CapacityExceeded(Bound.TOTAL_NODES, self.config.total_nodes_bound, total)

    def publish(self) -> None:
        """Refresh list-size statistics and notify the metrics sink."""
        self.statistics.observe_lists(len(self.open_list), len(self.closed_set))
        if self.metrics is not None:
            self.metrics.update(self.statistics.snapshot())

    def verify(self) -> None:
        """Check queue consistency and open/closed disjointness.

        Raises:
            ContractViolation: If an invariant is broken
        """
        self.open_list.validate()
        for node in self.closed_set:
            if node.state in self.open_list:
                raise ContractViolation(f"State on both open and closed lists: {node.state!r}")


class AStarSearcher:
    """A* search with duplicate detection and reopening."""

    def __init__(self, config: Optional[SearchConfig] = None):
        """Initialize A* searcher.

        Args:
            config: Search configuration. Falls back to the loaded Hydra
                configuration, then to unbounded defaults.
        """
        self.config = config or SearchConfig.from_global_config()

        logger.debug(f"A* searcher initialized with tie_break={self.config.tie_break.value}, "
                     f"open_list_bound={self.config.open_list_bound}, "
                     f"total_nodes_bound={self.config.total_nodes_bound}")

    def search(self, start: PuzzleState, goal: PuzzleState,
               clock: Optional[Clock] = None,
               metrics: Optional[MetricsSink] = None) -> SearchResult:
        """Search for a cheapest path from ``start`` to ``goal``.

        Args:
            start: Starting state; its ``monotonic`` tag selects the reopening policy
            goal: Goal state, matched by equality
            clock: Elapsed-time source for the time bound (a fresh
                ``MonotonicClock`` if omitted)
            metrics: Optional sink receiving list-size snapshots

        Returns:
            SearchResult with the path (goal -> start) and statistics

        Raises:
            ContractViolation: If a state or the engine breaks an invariant
        """
        if start is None or goal is None:
            raise ContractViolation("search requires both a start and a goal state")

        start_time = time.perf_counter()
        session = SearchSession(start, goal, self.config, clock or MonotonicClock(), metrics)

        logger.info(f"Starting A* search: {start!r} -> {goal!r} (monotonic={session.monotonic})")

        result = SearchResult(outcome=SearchOutcome.NO_PATH, statistics=session.statistics)
        try:
            goal_node = self._run(session)
        except TimedOut as e:
            result.outcome = SearchOutcome.TIMED_OUT
            result.message = str(e)
            logger.warning(f"A* search stopped: {e}")
        except CapacityExceeded as e:
            result.outcome = SearchOutcome.CAPACITY_EXCEEDED
            result.exceeded_bound = e.bound
            result.message = str(e)
            logger.warning(f"A* search stopped: {e}")
        else:
            if goal_node is not None:
                result.outcome = SearchOutcome.GOAL_FOUND
                result.path = goal_node.path()
                result.cost = goal_node.g
                session.statistics.solution_length = result.solution_length
            else:
                result.message = "Open list exhausted without reaching the goal"

        session.statistics.nodes_closed = len(session.closed_set)
        result.computation_time = time.perf_counter() - start_time

        logger.info(f"A* search finished: {result.outcome.value}, "
                    f"opened={session.statistics.nodes_opened}, "
                    f"reopened={session.statistics.nodes_reopened}, "
                    f"closed={session.statistics.nodes_closed}, "
                    f"time={result.computation_time:.3f}s")
        return result

    def _run(self, session: SearchSession) -> Optional[SearchNode]:
        """Main expansion loop. Returns the goal node, or None if the open list empties."""
        open_list = session.open_list
        closed_set = session.closed_set
        stats = session.statistics
        trace = self.config.report_state_path

        open_list.insert(SearchNode.root(session.start))
        session.publish()

        while not open_list.is_empty():
            session.check_time()
            session.check_expansions()

            current = open_list.extract_min()
            stats.nodes_opened += 1
            session.publish()

            if current.state == session.goal:
                return current

            if trace:
                logger.info(f"Expanding {current.state!r} (g={current.g}, f={current.f})")

            for child_state in current.state.children():
                candidate = current.child(child_state)
                stats.nodes_generated += 1

                if trace:
                    logger.info(f"Generated {child_state!r} (g={candidate.g}, f={candidate.f})")

                if child_state == current.state:
                    # Self-loop: the state being expanded counts as closed.
                    stats.nodes_discarded += 1
                    continue

                if child_state in closed_set:
                    existing = closed_set.get(child_state)
                    if session.monotonic or not candidate.f < existing.f:
                        stats.nodes_discarded += 1
                        continue
                    closed_set.remove(child_state)
                    open_list.insert(candidate)
                    stats.nodes_reopened += 1
                    logger.debug(f"Reopened {child_state!r}: f {existing.f} -> {candidate.f}")

                elif child_state in open_list:
                    existing = open_list.get(child_state)
                    if session.monotonic or not candidate.f < existing.f:
                        stats.nodes_discarded += 1
                        continue
                    open_list.remove(child_state)
                    open_list.insert(candidate)
                    stats.nodes_replaced += 1
                    logger.debug(f"Replaced open {child_state!r}: f {existing.f} -> {candidate.f}")

                else:
                    open_list.insert(candidate)

                session.publish()
                session.check_total_nodes()

            closed_set.add(current)
            session.publish()
            session.check_total_nodes()

            if self.config.validate_invariants:
                session.verify()

        return None


def search(start: PuzzleState, goal: PuzzleState,
           config: Optional[SearchConfig] = None,
           clock: Optional[Clock] = None,
           metrics: Optional[MetricsSink] = None) -> SearchResult:
    """Run one A* search. See ``AStarSearcher.search``.

    Without ``config`` the search is unbounded; loaded Hydra configuration is
    only picked up by ``AStarSearcher`` itself.
    """
    return AStarSearcher(config or SearchConfig()).search(start, goal, clock=clock, metrics=metrics)


def create_astar_searcher(open_list_bound: int = UNBOUNDED,
                          total_nodes_bound: int = UNBOUNDED,
                          time_bound_ms: float = UNBOUNDED,
                          max_expansions: int = UNBOUNDED,
                          tie_break: TieBreak = TieBreak.NONE) -> AStarSearcher:
    """Factory function to create an A* searcher with custom bounds.

    Args:
        open_list_bound: Maximum open list size
        total_nodes_bound: Maximum combined open and closed list size
        time_bound_ms: Time budget in milliseconds
        max_expansions: Maximum number of nodes taken off the open list
        tie_break: Ordering among open nodes with equal f

    Returns:
        Configured AStarSearcher instance
    """
    config = SearchConfig(
        open_list_bound=open_list_bound,
        total_nodes_bound=total_nodes_bound,
        time_bound_ms=time_bound_ms,
        max_expansions=max_expansions,
        tie_break=tie_break
    )

    return AStarSearcher(config)
