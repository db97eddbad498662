"""Todo payload models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, StrictInt


class TodoSummary(BaseModel):
    """Compact todo view used for edge expansion."""

    id: int
    title: str
    due_date: datetime | None = None
    earliest_start: datetime | None = None
    is_critical: bool = False


class TodoDetail(TodoSummary):
    """Full todo view with both edge directions expanded."""

    image_url: str | None = None
    image_id: str | None = None
    created_at: datetime
    dependencies: list[TodoSummary] = Field(default_factory=list)
    dependents: list[TodoSummary] = Field(default_factory=list)


class DependencyEditRequest(BaseModel):
    """Validated body of a dependency add/remove call."""

    task_id: StrictInt
    dependency_ids: list[StrictInt]
