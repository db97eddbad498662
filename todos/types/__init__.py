"""Typed todo payload models."""

from todos.types.todo import DependencyEditRequest, TodoDetail, TodoSummary

__all__ = [
    "DependencyEditRequest",
    "TodoDetail",
    "TodoSummary",
]
