"""Critical-path marking over the whole dependency graph."""

from __future__ import annotations

from planner.dependency_graph import DependencyGraph
from planner.errors import CycleInvariantViolated


def bottleneck_dependency(graph: DependencyGraph, task_id: int) -> int | None:
    """Direct dependency with the latest effective completion.

    Effective completion is the due date, falling back to the creation date.
    Dependencies are scanned in ascending id order and only a strictly later
    date replaces the current pick, so ties go to the lowest id.
    """
    chosen: int | None = None
    for dependency_id in graph.dependencies_of(task_id):
        if chosen is None:
            chosen = dependency_id
            continue
        candidate = graph.nodes[dependency_id].effective_completion
        if candidate > graph.nodes[chosen].effective_completion:
            chosen = dependency_id
    return chosen


def mark_critical_path(graph: DependencyGraph) -> set[int]:
    """Return the ids on the critical path without touching the graph.

    Walks backward from every end node (ascending id order) through the
    bottleneck dependency until a source node is reached. A walk ends early
    on a todo an earlier walk already marked, since the rest of the walk
    from there is the same.
    """
    critical: set[int] = set()
    for end_id in graph.end_nodes():
        path: list[int] = []
        on_path: set[int] = set()
        current: int | None = end_id
        while current is not None:
            if current in on_path:
                raise CycleInvariantViolated(path[path.index(current):] + [current])
            if current in critical:
                break
            path.append(current)
            on_path.add(current)
            critical.add(current)
            current = bottleneck_dependency(graph, current)
    return critical


def apply_critical_flags(graph: DependencyGraph, critical: set[int]) -> None:
    """Clear every flag in the snapshot, then set the given ones."""
    for task_id, node in graph.nodes.items():
        node.is_critical = task_id in critical
