"""Shared builders for in-memory dependency graphs."""

from __future__ import annotations

from datetime import UTC, datetime

from planner.dependency_graph import DependencyGraph, TaskNode


def day(n: int) -> datetime:
    return datetime(2025, 1, n, 9, 0, tzinfo=UTC)


def build_graph(
    nodes: dict[int, tuple[int, int | None]],
    edges: list[tuple[int, int]] | None = None,
) -> DependencyGraph:
    """``nodes`` maps id -> (created day, due day or None); edges are (dependent, dependency)."""
    graph = DependencyGraph()
    for task_id, (created, due) in nodes.items():
        graph.add_node(
            TaskNode(
                id=task_id,
                title=f"task {task_id}",
                created_at=day(created),
                due_date=day(due) if due is not None else None,
            )
        )
    for dependent_id, dependency_id in edges or []:
        graph.add_edge(dependent_id, dependency_id)
    return graph
