"""Typer command handlers."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import typer

from core.config_loader import configure_logging
from core.orchestrator import Orchestrator, RuntimeBundle
from planner.dependency_editor import DependencyEditResult
from planner.errors import CycleInvariantViolated

_root: Path | None = None


def set_root(root: Path | None) -> None:
    global _root
    _root = root


def _runtime() -> RuntimeBundle:
    bundle = Orchestrator(root=_root).build()
    configure_logging(bundle.config)
    return bundle


def todos_add(title: str, due: datetime | None) -> None:
    """Create a todo."""
    bundle = _runtime()
    try:
        todo = bundle.todos.create_todo(title=title, due_date=due)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps(_json_safe(todo), indent=2))


def todos_list() -> None:
    """List all todos."""
    bundle = _runtime()
    typer.echo(json.dumps(_json_safe(bundle.todos.list_todos()), indent=2))


def todos_show(todo_id: int) -> None:
    """Show a todo."""
    bundle = _runtime()
    todo = bundle.todos.get_todo(todo_id)
    if todo is None:
        typer.echo(f"Error: Todo {todo_id} not found.", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(_json_safe(todo), indent=2))


def todos_delete(todo_id: int) -> None:
    """Delete a todo and re-derive the rest."""
    bundle = _runtime()
    _report(bundle.editor.delete_task(todo_id))


def deps_add(todo_id: int, dependency_ids: list[int]) -> None:
    """Add dependencies."""
    bundle = _runtime()
    _report(bundle.editor.add_dependencies(todo_id, dependency_ids))


def deps_remove(todo_id: int, dependency_ids: list[int]) -> None:
    """Remove dependencies."""
    bundle = _runtime()
    _report(bundle.editor.remove_dependencies(todo_id, dependency_ids))


def deps_show(todo_id: int) -> None:
    """Show both edge directions of a todo."""
    bundle = _runtime()
    todo = bundle.todos.get_todo(todo_id)
    if todo is None:
        typer.echo(f"Error: Todo {todo_id} not found.", err=True)
        raise typer.Exit(code=1)
    payload = {"dependencies": todo["dependencies"], "dependents": todo["dependents"]}
    typer.echo(json.dumps(_json_safe(payload), indent=2))


def graph_recompute() -> None:
    """Recompute all derived attributes."""
    bundle = _runtime()
    _report(bundle.editor.recompute_all())


def graph_critical() -> None:
    """Re-mark the critical path and list it."""
    bundle = _runtime()
    try:
        critical = bundle.editor.recompute_critical_path()
    except CycleInvariantViolated as exc:
        typer.echo(f"Error (cycle_invariant_violated): {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps(sorted(critical)))


def config_show() -> None:
    """Show effective runtime config."""
    bundle = _runtime()
    typer.echo(json.dumps(_json_safe(bundle.config), indent=2))


def _report(result: DependencyEditResult) -> None:
    if not result.ok:
        kind = result.error.value if result.error else "error"
        typer.echo(f"Error ({kind}): {result.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(result.message)
    if result.degraded:
        typer.echo("Warning: derived attributes are stale; run 'graph recompute'.", err=True)
    if result.earliest_start is not None:
        typer.echo(f"Earliest start: {result.earliest_start.isoformat()}")
    if result.critical_ids:
        typer.echo(f"Critical path: {', '.join(str(i) for i in result.critical_ids)}")


def _json_safe(payload: object) -> object:
    """Convert datetimes to strings for JSON output."""
    if isinstance(payload, dict):
        return {k: _json_safe(v) for k, v in payload.items()}
    if isinstance(payload, list):
        return [_json_safe(v) for v in payload]
    if isinstance(payload, datetime):
        return payload.isoformat()
    return payload
