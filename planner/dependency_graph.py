"""Id-keyed snapshot of the todo dependency graph."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class TaskNode:
    """Scheduling-relevant attributes of one todo."""

    id: int
    created_at: datetime
    due_date: datetime | None = None
    earliest_start: datetime | None = None
    is_critical: bool = False
    title: str = ""

    @property
    def effective_completion(self) -> datetime:
        """Due date when set, else creation date."""
        return self.due_date or self.created_at


@dataclass
class DependencyGraph:
    """Represents dependencies among todos.

    Nodes reference each other only by id. ``dependencies[a]`` holds the ids
    that ``a`` depends on. Every accessor returns ids in ascending order so
    traversals and tie-breaks are deterministic.
    """

    nodes: dict[int, TaskNode] = field(default_factory=dict)
    dependencies: dict[int, set[int]] = field(default_factory=lambda: defaultdict(set))

    def __post_init__(self) -> None:
        self.dependencies = defaultdict(set, self.dependencies)
        self._dependents: dict[int, set[int]] = defaultdict(set)
        for dependent_id, dependency_ids in self.dependencies.items():
            for dependency_id in dependency_ids:
                self._dependents[dependency_id].add(dependent_id)

    def add_node(self, node: TaskNode) -> None:
        self.nodes[node.id] = node

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.nodes

    def add_edge(self, dependent_id: int, dependency_id: int) -> None:
        self.dependencies[dependent_id].add(dependency_id)
        self._dependents[dependency_id].add(dependent_id)

    def remove_edge(self, dependent_id: int, dependency_id: int) -> None:
        self.dependencies[dependent_id].discard(dependency_id)
        self._dependents[dependency_id].discard(dependent_id)

    def dependencies_of(self, task_id: int) -> list[int]:
        """Direct dependencies that exist as nodes."""
        return sorted(dep for dep in self.dependencies.get(task_id, ()) if dep in self.nodes)

    def dependents_of(self, task_id: int) -> list[int]:
        """Direct dependents that exist as nodes."""
        return sorted(dep for dep in self._dependents.get(task_id, ()) if dep in self.nodes)

    def transitive_dependents(self, task_id: int) -> list[int]:
        """Every todo that reaches ``task_id`` through dependency edges."""
        seen: set[int] = set()
        stack = [task_id]
        while stack:
            current = stack.pop()
            for dependent_id in self.dependents_of(current):
                if dependent_id not in seen and dependent_id != task_id:
                    seen.add(dependent_id)
                    stack.append(dependent_id)
        return sorted(seen)

    def end_nodes(self) -> list[int]:
        """Todos nothing depends on (sinks)."""
        return [task_id for task_id in sorted(self.nodes) if not self.dependents_of(task_id)]
