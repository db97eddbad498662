"""Error kinds raised and reported by dependency editing."""

from __future__ import annotations

from enum import Enum


class DependencyErrorKind(str, Enum):
    """Why a dependency edit was rejected."""

    SELF_DEPENDENCY = "self_dependency"
    CYCLE_DETECTED = "cycle_detected"
    TASK_NOT_FOUND = "task_not_found"
    INVALID_INPUT = "invalid_input"


class DependencyRejected(ValueError):
    """A requested edit violates a precondition; nothing was written."""

    def __init__(self, kind: DependencyErrorKind, message: str, failed_id: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.failed_id = failed_id
        self.message = message


class CycleInvariantViolated(RuntimeError):
    """A derived-attribute pass met a cycle that edge validation should have prevented."""

    def __init__(self, path: list[int]) -> None:
        self.path = list(path)
        rendered = " -> ".join(str(task_id) for task_id in self.path)
        super().__init__(f"Dependency cycle found during recompute: {rendered}")
