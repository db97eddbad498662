"""Earliest-start calculator tests."""

from __future__ import annotations

import pytest

from planner.earliest_start import EarliestStartCalculator, recompute_earliest_starts
from planner.errors import CycleInvariantViolated
from tests.graph_fixtures import build_graph, day


def test_task_without_dependencies_starts_at_creation() -> None:
    graph = build_graph({1: (4, 9)})
    assert EarliestStartCalculator(graph).earliest_start(1) == day(4)


def test_chain_uses_dependency_due_date() -> None:
    # A created day 1; B due day 5 depends on A; C depends on B.
    graph = build_graph({1: (1, None), 2: (2, 5), 3: (3, None)}, [(2, 1), (3, 2)])
    calculator = EarliestStartCalculator(graph)

    assert calculator.earliest_start(2) == day(1)
    assert calculator.earliest_start(3) == day(5)


def test_latest_dependency_wins() -> None:
    graph = build_graph(
        {1: (1, 3), 2: (1, 12), 3: (1, None), 4: (2, None)},
        [(4, 1), (4, 2), (4, 3)],
    )
    assert EarliestStartCalculator(graph).earliest_start(4) == day(12)


def test_inherited_start_beats_earlier_due_date() -> None:
    # 2 is due day 4 but cannot start before day 10, so 3 waits for day 10.
    graph = build_graph({1: (1, 10), 2: (2, 4), 3: (3, None)}, [(2, 1), (3, 2)])
    assert EarliestStartCalculator(graph).earliest_start(3) == day(10)


def test_never_earlier_than_any_dependency_date() -> None:
    graph = build_graph(
        {1: (1, None), 2: (3, 8), 3: (6, None), 4: (2, None), 5: (1, None)},
        [(2, 1), (3, 2), (4, 1), (5, 3), (5, 4)],
    )
    calculator = EarliestStartCalculator(graph)
    result = calculator.earliest_start(5)
    for dep_id in graph.dependencies_of(5):
        node = graph.nodes[dep_id]
        floor = [node.created_at, calculator.earliest_start(dep_id)]
        if node.due_date is not None:
            floor.append(node.due_date)
        assert result >= max(floor)


def test_missing_task_yields_none() -> None:
    graph = build_graph({1: (1, None)})
    assert EarliestStartCalculator(graph).earliest_start(42) is None


def test_cycle_fails_loudly() -> None:
    graph = build_graph({1: (1, None), 2: (1, None), 3: (1, None)}, [(1, 2), (2, 3), (3, 2)])
    with pytest.raises(CycleInvariantViolated) as exc_info:
        EarliestStartCalculator(graph).earliest_start(1)
    assert exc_info.value.path == [2, 3, 2]


def test_recompute_many_shares_results() -> None:
    graph = build_graph({1: (1, 2), 2: (2, None), 3: (5, None)}, [(2, 1), (3, 2)])
    result = recompute_earliest_starts(graph, [3, 2, 1])
    assert result == {3: day(2), 2: day(2), 1: day(1)}


def test_long_chain_is_computed_iteratively() -> None:
    size = 5000
    nodes = {i: (1, None) for i in range(1, size + 1)}
    nodes[size] = (1, 20)
    edges = [(i, i + 1) for i in range(1, size)]
    graph = build_graph(nodes, edges)
    assert EarliestStartCalculator(graph).earliest_start(1) == day(20)
