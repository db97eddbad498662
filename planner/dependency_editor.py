"""Dependency edits that keep the graph acyclic and derived attributes fresh."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from core.event_bus import EventBus
from planner.critical_path import apply_critical_flags, mark_critical_path
from planner.cycle_detector import would_create_cycle
from planner.dependency_graph import DependencyGraph
from planner.earliest_start import recompute_earliest_starts
from planner.errors import CycleInvariantViolated, DependencyErrorKind, DependencyRejected
from todos.todo_manager import TodoManager
from todos.types import DependencyEditRequest

logger = logging.getLogger("tg.editor")


@dataclass
class DependencyEditResult:
    """Outcome of one edit call."""

    ok: bool
    message: str
    error: DependencyErrorKind | None = None
    failed_id: int | None = None
    degraded: bool = False
    earliest_start: datetime | None = None
    critical_ids: list[int] = field(default_factory=list)


@dataclass
class DerivedState:
    earliest_starts: dict[int, datetime | None]
    critical_ids: set[int]


class DependencyEditor:
    """Validates, applies and re-derives dependency edits as single transactions."""

    def __init__(self, todo_manager: TodoManager, event_bus: EventBus | None = None) -> None:
        self.todos = todo_manager
        self.event_bus = event_bus or EventBus()

    def add_dependencies(self, task_id: Any, dependency_ids: Any) -> DependencyEditResult:
        """Add ``task_id -> dep`` for every id, or nothing at all on rejection."""
        try:
            request = self._parse(task_id, dependency_ids)
            with self.todos.transaction() as sess:
                graph = self.todos.load_graph(sess)
                self._validate_add(graph, request)
                added = self.todos.connect(sess, request.task_id, request.dependency_ids)
                for dep_id in added:
                    graph.add_edge(request.task_id, dep_id)
                result = self._refresh(sess, graph, request.task_id)
        except DependencyRejected as exc:
            return self._rejected("dependencies.add", task_id, dependency_ids, exc)

        result.message = "Dependencies added successfully."
        logger.info("Added dependencies %s to todo %s", added, request.task_id)
        self._emit("dependencies.added", request, result)
        return result

    def remove_dependencies(self, task_id: Any, dependency_ids: Any) -> DependencyEditResult:
        """Remove edges; ids that were never dependencies are ignored."""
        try:
            request = self._parse(task_id, dependency_ids)
            with self.todos.transaction() as sess:
                graph = self.todos.load_graph(sess)
                self._require_task(graph, request.task_id)
                removed = self.todos.disconnect(sess, request.task_id, request.dependency_ids)
                for dep_id in request.dependency_ids:
                    graph.remove_edge(request.task_id, dep_id)
                result = self._refresh(sess, graph, request.task_id)
        except DependencyRejected as exc:
            return self._rejected("dependencies.remove", task_id, dependency_ids, exc)

        result.message = "Dependencies removed successfully."
        logger.info("Removed %d dependencies from todo %s", removed, request.task_id)
        self._emit("dependencies.removed", request, result)
        return result

    def delete_task(self, task_id: int) -> DependencyEditResult:
        """Delete a todo with its edges and re-derive the rest in the same transaction."""
        try:
            with self.todos.transaction() as sess:
                if not self.todos.remove(sess, task_id):
                    raise DependencyRejected(
                        DependencyErrorKind.TASK_NOT_FOUND, f"Todo {task_id} not found.", task_id
                    )
                result = self._recompute_graph(sess)
        except DependencyRejected as exc:
            return self._rejected("todos.delete", task_id, [], exc)
        result.message = f"Todo {task_id} deleted."
        return result

    def recompute_all(self) -> DependencyEditResult:
        """Refresh every earliest start and the critical path."""
        with self.todos.transaction() as sess:
            return self._recompute_graph(sess)

    def recompute_critical_path(self) -> set[int]:
        """Re-mark the whole graph and persist the flags as one batch.

        A cycle is logged and announced as ``derived.degraded`` before it
        propagates; nothing is written in that case.
        """
        with self.todos.transaction() as sess:
            graph = self.todos.load_graph(sess)
            try:
                critical = mark_critical_path(graph)
            except CycleInvariantViolated as exc:
                self._report_degraded(None, exc)
                raise
            self.todos.write_derived(sess, {}, critical)
        return critical

    @staticmethod
    def _parse(task_id: Any, dependency_ids: Any) -> DependencyEditRequest:
        try:
            return DependencyEditRequest(task_id=task_id, dependency_ids=dependency_ids)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise DependencyRejected(
                DependencyErrorKind.INVALID_INPUT,
                f"Invalid input at {location}: {first['msg']}",
            ) from exc

    @staticmethod
    def _require_task(graph: DependencyGraph, task_id: int) -> None:
        if task_id not in graph:
            raise DependencyRejected(
                DependencyErrorKind.TASK_NOT_FOUND, f"Todo {task_id} not found.", task_id
            )

    def _validate_add(self, graph: DependencyGraph, request: DependencyEditRequest) -> None:
        self._require_task(graph, request.task_id)
        for dep_id in request.dependency_ids:
            if dep_id == request.task_id:
                raise DependencyRejected(
                    DependencyErrorKind.SELF_DEPENDENCY,
                    "Cannot add self as dependency.",
                    dep_id,
                )
            if dep_id not in graph:
                raise DependencyRejected(
                    DependencyErrorKind.TASK_NOT_FOUND,
                    f"Dependency {dep_id} not found.",
                    dep_id,
                )
            if would_create_cycle(graph, request.task_id, dep_id):
                raise DependencyRejected(
                    DependencyErrorKind.CYCLE_DETECTED,
                    f"Adding dependency {dep_id} would create a circular dependency.",
                    dep_id,
                )

    def _refresh(self, sess: Session, graph: DependencyGraph, task_id: int) -> DependencyEditResult:
        # The edited todo and everything downstream read its date.
        affected = [task_id, *graph.transitive_dependents(task_id)]
        try:
            derived = self._derive(graph, affected)
        except CycleInvariantViolated as exc:
            return self._degraded(task_id, exc)
        self.todos.write_derived(sess, derived.earliest_starts, derived.critical_ids)
        return DependencyEditResult(
            ok=True,
            message="",
            earliest_start=derived.earliest_starts[task_id],
            critical_ids=sorted(derived.critical_ids),
        )

    @staticmethod
    def _derive(graph: DependencyGraph, task_ids: list[int]) -> DerivedState:
        earliest = recompute_earliest_starts(graph, task_ids)
        for task_id, value in earliest.items():
            graph.nodes[task_id].earliest_start = value
        critical = mark_critical_path(graph)
        apply_critical_flags(graph, critical)
        return DerivedState(earliest_starts=earliest, critical_ids=critical)

    def _recompute_graph(self, sess: Session) -> DependencyEditResult:
        graph = self.todos.load_graph(sess)
        try:
            derived = self._derive(graph, sorted(graph.nodes))
        except CycleInvariantViolated as exc:
            return self._degraded(None, exc)
        self.todos.write_derived(sess, derived.earliest_starts, derived.critical_ids)
        return DependencyEditResult(
            ok=True,
            message="Derived attributes recomputed.",
            critical_ids=sorted(derived.critical_ids),
        )

    def _report_degraded(self, task_id: int | None, exc: CycleInvariantViolated) -> None:
        logger.error("Derived attributes left stale: %s", exc)
        self.event_bus.emit(
            "derived.degraded",
            {"task_id": task_id, "cycle": exc.path, "reason": str(exc)},
        )

    def _degraded(self, task_id: int | None, exc: CycleInvariantViolated) -> DependencyEditResult:
        self._report_degraded(task_id, exc)
        return DependencyEditResult(
            ok=True, message="Derived attributes could not be recomputed.", degraded=True
        )

    def _rejected(
        self, action: str, task_id: Any, dependency_ids: Any, exc: DependencyRejected
    ) -> DependencyEditResult:
        logger.warning("Rejected %s for todo %s: %s", action, task_id, exc.message)
        self.event_bus.emit(
            "dependencies.rejected",
            {
                "action": action,
                "task_id": task_id,
                "dependency_ids": dependency_ids,
                "error": exc.kind.value,
                "failed_id": exc.failed_id,
                "reason": exc.message,
            },
        )
        return DependencyEditResult(
            ok=False, message=exc.message, error=exc.kind, failed_id=exc.failed_id
        )

    def _emit(self, event_name: str, request: DependencyEditRequest, result: DependencyEditResult) -> None:
        self.event_bus.emit(
            event_name,
            {
                "task_id": request.task_id,
                "dependency_ids": request.dependency_ids,
                "degraded": result.degraded,
                "critical_ids": result.critical_ids,
            },
        )
