"""Cycle detection for proposed dependency edges."""

from __future__ import annotations

from planner.dependency_graph import DependencyGraph


def would_create_cycle(graph: DependencyGraph, dependent_id: int, candidate_id: int) -> bool:
    """Return True when adding ``dependent_id -> candidate_id`` closes a cycle.

    Walks the candidate's dependencies transitively with an explicit stack.
    Reaching ``dependent_id`` means the dependent is already upstream of the
    candidate. Meeting a node that is still on the current path means the
    stored graph already holds a cycle, which is reported the same way.
    Unknown ids have no dependencies and contribute nothing.
    """
    if dependent_id == candidate_id:
        return True

    visited: set[int] = {candidate_id}
    on_stack: set[int] = {candidate_id}
    stack = [(candidate_id, iter(graph.dependencies_of(candidate_id)))]

    while stack:
        current, pending = stack[-1]
        for dependency_id in pending:
            if dependency_id == dependent_id or dependency_id in on_stack:
                return True
            if dependency_id in visited:
                continue
            visited.add(dependency_id)
            on_stack.add(dependency_id)
            stack.append((dependency_id, iter(graph.dependencies_of(dependency_id))))
            break
        else:
            stack.pop()
            on_stack.discard(current)
    return False
