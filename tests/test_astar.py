"""Tests for A* search algorithm."""

import logging

import numpy as np
import pytest

from astar_solver.config import load_config, reset_config
from astar_solver.core.exceptions import Bound, ContractViolation
from astar_solver.search.astar import (
    AStarSearcher, SearchConfig, SearchOutcome, SearchResult, create_astar_searcher, search
)
from astar_solver.search.indexed_heap import TieBreak
from astar_solver.search.metrics import RecordingMetricsSink
from puzzles import FakeClock, GridWorld, WeightedGraph, path_cost, reopening_graph


def assert_connected(states):
    """Consecutive cells of a grid path are orthogonal neighbours."""
    for a, b in zip(states, states[1:]):
        assert abs(a.x - b.x) + abs(a.y - b.y) == 1


class TestGridSearch:
    """A* on the obstacle-free 5x5 grid from (0, 0) to (4, 4)."""

    @pytest.fixture
    def world(self):
        return GridWorld.open(5, 5, goal=(4, 4))

    @pytest.mark.parametrize("tie_break, opened, closed", [
        (TieBreak.NONE, 16, 15),
        (TieBreak.FIFO, 25, 24),
        (TieBreak.LIFO, 9, 8),
    ])
    def test_regression_counts(self, world, tie_break, opened, closed):
        searcher = AStarSearcher(SearchConfig(tie_break=tie_break))
        result = searcher.search(world.cell(0, 0), world.cell(4, 4))

        assert result.outcome is SearchOutcome.GOAL_FOUND
        assert result.success
        assert result.solution_length == 8
        assert result.cost == 8.0
        assert result.statistics.nodes_opened == opened
        assert result.statistics.nodes_closed == closed
        assert result.statistics.nodes_reopened == 0
        assert result.statistics.solution_length == 8

    def test_path_runs_goal_to_start(self, world):
        result = AStarSearcher(SearchConfig()).search(world.cell(0, 0), world.cell(4, 4))

        assert result.path[0] == world.cell(4, 4)
        assert result.path[-1] == world.cell(0, 0)
        assert_connected(result.path)
        assert result.start_to_goal() == list(reversed(result.path))

    def test_invariant_checks_do_not_change_result(self, world):
        plain = AStarSearcher(SearchConfig()).search(world.cell(0, 0), world.cell(4, 4))
        checked = AStarSearcher(SearchConfig(validate_invariants=True)).search(
            world.cell(0, 0), world.cell(4, 4)
        )

        assert checked.outcome is SearchOutcome.GOAL_FOUND
        assert checked.path == plain.path
        assert checked.statistics.nodes_opened == plain.statistics.nodes_opened

    def test_total_nodes_bound(self, world):
        config = SearchConfig(total_nodes_bound=5)
        result = AStarSearcher(config).search(world.cell(0, 0), world.cell(4, 4))

        assert result.outcome is SearchOutcome.CAPACITY_EXCEEDED
        assert result.exceeded_bound is Bound.TOTAL_NODES
        assert result.path is None
        assert result.cost is None
        assert result.statistics.nodes_opened == 3
        assert not result.success

    def test_open_list_bound(self, world):
        config = SearchConfig(open_list_bound=2)
        result = AStarSearcher(config).search(world.cell(0, 0), world.cell(4, 4))

        assert result.outcome is SearchOutcome.CAPACITY_EXCEEDED
        assert result.exceeded_bound is Bound.OPEN_LIST
        assert result.statistics.nodes_opened == 2

    def test_time_bound(self, world):
        clock = FakeClock(step=10.0)
        config = SearchConfig(time_bound_ms=25)
        result = AStarSearcher(config).search(world.cell(0, 0), world.cell(4, 4), clock=clock)

        assert result.outcome is SearchOutcome.TIMED_OUT
        assert result.exceeded_bound is None
        assert result.statistics.nodes_opened == 2
        assert clock.calls == 3
        assert "timed out" in result.message

    def test_max_expansions(self, world):
        config = SearchConfig(max_expansions=4)
        result = AStarSearcher(config).search(world.cell(0, 0), world.cell(4, 4))

        assert result.outcome is SearchOutcome.CAPACITY_EXCEEDED
        assert result.exceeded_bound is Bound.EXPANSIONS
        assert result.statistics.nodes_opened == 4

    def test_start_is_goal(self, world):
        sink = RecordingMetricsSink()
        result = AStarSearcher(SearchConfig()).search(world.cell(2, 2), world.cell(2, 2), metrics=sink)

        assert result.outcome is SearchOutcome.GOAL_FOUND
        assert result.path == [world.cell(2, 2)]
        assert result.cost == 0.0
        assert result.solution_length == 0
        assert result.statistics.nodes_opened == 1
        assert result.statistics.nodes_closed == 0
        assert len(sink.snapshots) == 2

    def test_detour_around_wall(self):
        costs = np.array([
            [1, np.inf, 1],
            [1, np.inf, 1],
            [1, 1, 1],
        ])
        world = GridWorld(costs, goal=(2, 0))
        result = AStarSearcher(SearchConfig()).search(world.cell(0, 0), world.cell(2, 0))

        assert result.outcome is SearchOutcome.GOAL_FOUND
        assert result.solution_length == 6
        assert result.cost == 6.0
        assert_connected(result.path)

    def test_weighted_cells(self):
        costs = np.ones((3, 3))
        costs[1, 1] = 10.0
        world = GridWorld(costs, goal=(2, 1))
        result = AStarSearcher(SearchConfig()).search(world.cell(0, 1), world.cell(2, 1))

        assert result.cost == 4.0
        assert result.solution_length == 4
        assert world.cell(1, 1) not in result.path
        assert path_cost(result.start_to_goal()) == result.cost

    def test_no_path(self):
        costs = np.ones((3, 3))
        costs[:, 1] = np.inf
        world = GridWorld(costs, goal=(2, 0))
        result = AStarSearcher(SearchConfig()).search(world.cell(0, 0), world.cell(2, 0))

        assert result.outcome is SearchOutcome.NO_PATH
        assert result.path is None
        assert result.solution_length is None
        assert result.start_to_goal() == []
        assert result.statistics.nodes_opened == 3
        assert result.statistics.nodes_closed == 3


class TestReopening:
    """Reopening of closed states under an inconsistent heuristic."""

    def test_non_monotonic_reopens_for_optimal_cost(self):
        graph = reopening_graph(monotonic=False)
        result = AStarSearcher(SearchConfig(validate_invariants=True)).search(
            graph.state('S'), graph.state('G')
        )

        assert result.outcome is SearchOutcome.GOAL_FOUND
        assert result.cost == 11.0
        assert [s.name for s in result.path] == ['G', 'C', 'B', 'S']
        assert result.statistics.nodes_reopened == 1
        assert result.statistics.nodes_replaced == 1
        assert result.statistics.nodes_opened == 6
        assert result.statistics.nodes_closed == 4

    def test_monotonic_tag_disables_reopening(self):
        graph = reopening_graph(monotonic=True)
        result = AStarSearcher(SearchConfig()).search(graph.state('S'), graph.state('G'))

        assert result.outcome is SearchOutcome.GOAL_FOUND
        assert result.cost == 12.0
        assert [s.name for s in result.path] == ['G', 'C', 'A', 'S']
        assert result.statistics.nodes_reopened == 0
        assert result.statistics.nodes_replaced == 0
        assert result.statistics.nodes_opened == 5

    def test_self_loop_is_discarded(self):
        graph = WeightedGraph([('a', 'a', 0.0), ('a', 'b', 1.0)])
        result = AStarSearcher(SearchConfig(validate_invariants=True)).search(
            graph.state('a'), graph.state('b')
        )

        assert result.outcome is SearchOutcome.GOAL_FOUND
        assert result.cost == 1.0
        assert result.statistics.nodes_discarded == 1
        assert result.statistics.nodes_reopened == 0


class TestSearchInterface:
    """Result, configuration and error propagation."""

    @pytest.fixture
    def world(self):
        return GridWorld.open(5, 5, goal=(4, 4))

    def test_metrics_sink_receives_snapshots(self, world):
        sink = RecordingMetricsSink()
        result = AStarSearcher(SearchConfig(tie_break=TieBreak.LIFO)).search(
            world.cell(0, 0), world.cell(4, 4), metrics=sink
        )

        assert sink.latest.nodes_opened == 9
        assert sink.latest.open_list_max_len == result.statistics.open_list_max_len
        assert max(m.open_list_size for m in sink.snapshots) == result.statistics.open_list_max_len
        opened = [m.nodes_opened for m in sink.snapshots]
        assert opened == sorted(opened)

    def test_sessions_are_independent(self, world):
        searcher = AStarSearcher(SearchConfig())
        first = searcher.search(world.cell(0, 0), world.cell(4, 4))
        second = searcher.search(world.cell(0, 0), world.cell(4, 4))

        assert first.statistics is not second.statistics
        assert first.statistics.to_dict() == second.statistics.to_dict()

    def test_missing_start_or_goal(self, world):
        searcher = AStarSearcher(SearchConfig())

        with pytest.raises(ContractViolation):
            searcher.search(None, world.cell(4, 4))
        with pytest.raises(ContractViolation):
            searcher.search(world.cell(0, 0), None)

    def test_contract_violation_propagates(self):
        graph = WeightedGraph([('a', 'b', -2.0)])

        with pytest.raises(ContractViolation):
            AStarSearcher(SearchConfig()).search(graph.state('a'), graph.state('b'))

    def test_module_level_search_uses_defaults(self, world):
        reset_config()
        result = search(world.cell(0, 0), world.cell(4, 4))

        assert isinstance(result, SearchResult)
        assert result.success
        assert result.computation_time >= 0.0

    def test_module_level_search_ignores_loaded_config(self, world, tmp_path):
        """A loaded configuration bounds AStarSearcher(), never the bare search() call."""
        (tmp_path / "config.yaml").write_text(
            "search:\n  astar:\n    total_nodes_bound: 5\n"
        )
        load_config(config_dir=tmp_path)
        try:
            bounded = AStarSearcher().search(world.cell(0, 0), world.cell(4, 4))
            result = search(world.cell(0, 0), world.cell(4, 4))
        finally:
            reset_config()

        assert bounded.exceeded_bound is Bound.TOTAL_NODES
        assert result.success
        assert result.statistics.nodes_opened == 16

    def test_create_astar_searcher(self):
        searcher = create_astar_searcher(total_nodes_bound=10, tie_break=TieBreak.FIFO)

        assert searcher.config.total_nodes_bound == 10
        assert searcher.config.tie_break is TieBreak.FIFO

    def test_config_accepts_tie_break_names(self):
        assert SearchConfig(tie_break="LIFO").tie_break is TieBreak.LIFO

    def test_config_rejects_negative_bounds(self):
        with pytest.raises(ValueError):
            SearchConfig(open_list_bound=-1)

    def test_state_path_report(self, world, caplog):
        config = SearchConfig(report_state_path=True, tie_break=TieBreak.LIFO)

        with caplog.at_level(logging.INFO, logger="astar_solver.search.astar"):
            AStarSearcher(config).search(world.cell(0, 0), world.cell(4, 4))

        expanded = [r for r in caplog.records if r.getMessage().startswith("Expanding")]
        assert len(expanded) == 8

    def test_bound_termination_logs_warning(self, world, caplog):
        with caplog.at_level(logging.WARNING, logger="astar_solver.search.astar"):
            AStarSearcher(SearchConfig(total_nodes_bound=5)).search(world.cell(0, 0), world.cell(4, 4))

        assert any(r.levelno == logging.WARNING for r in caplog.records)
