"""Earliest possible start dates derived from the dependency chain."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from planner.dependency_graph import DependencyGraph
from planner.errors import CycleInvariantViolated


class EarliestStartCalculator:
    """Computes earliest starts over one graph snapshot, memoising results.

    A todo without dependencies may start at its creation date. Otherwise it
    starts no earlier than the latest completion among its dependencies,
    where a dependency completes at the latest of its own earliest start,
    its due date and its creation date.
    """

    def __init__(self, graph: DependencyGraph) -> None:
        self.graph = graph
        self._memo: dict[int, datetime] = {}

    def earliest_start(self, task_id: int) -> datetime | None:
        if task_id not in self.graph:
            return None
        if task_id in self._memo:
            return self._memo[task_id]

        path = [task_id]
        on_stack = {task_id}
        stack = [(task_id, iter(self.graph.dependencies_of(task_id)))]
        while stack:
            current, pending = stack[-1]
            descended = False
            for dependency_id in pending:
                if dependency_id in self._memo:
                    continue
                if dependency_id in on_stack:
                    cycle_start = path.index(dependency_id)
                    raise CycleInvariantViolated(path[cycle_start:] + [dependency_id])
                on_stack.add(dependency_id)
                path.append(dependency_id)
                stack.append((dependency_id, iter(self.graph.dependencies_of(dependency_id))))
                descended = True
                break
            if descended:
                continue
            stack.pop()
            path.pop()
            on_stack.discard(current)
            self._memo[current] = self._resolve(current)
        return self._memo[task_id]

    def completion(self, task_id: int) -> datetime:
        """Date a dependency is taken to be finished by."""
        node = self.graph.nodes[task_id]
        candidates = [node.created_at, self._memo[task_id]]
        if node.due_date is not None:
            candidates.append(node.due_date)
        return max(candidates)

    def _resolve(self, task_id: int) -> datetime:
        contributions = [self.completion(dep) for dep in self.graph.dependencies_of(task_id)]
        if not contributions:
            return self.graph.nodes[task_id].created_at
        return max(contributions)


def recompute_earliest_starts(
    graph: DependencyGraph, task_ids: Iterable[int]
) -> dict[int, datetime | None]:
    """Earliest start for each requested id, sharing one memo across them."""
    calculator = EarliestStartCalculator(graph)
    return {task_id: calculator.earliest_start(task_id) for task_id in task_ids}
