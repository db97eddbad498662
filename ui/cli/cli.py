"""CLI entrypoint for todo-graph."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer

from ui.cli import commands

app = typer.Typer(help="Todo tracking with dependency-derived schedules")
todos_app = typer.Typer(help="Todo commands")
deps_app = typer.Typer(help="Dependency commands")
graph_app = typer.Typer(help="Derived schedule commands")
config_app = typer.Typer(help="Configuration commands")


@app.callback()
def main_callback(
    root: Path | None = typer.Option(
        None, "--root", envvar="TODOGRAPH_ROOT", help="Runtime root holding config/ and the database"
    ),
) -> None:
    """Select the runtime root and configure logging."""
    commands.set_root(root)


@todos_app.command("add")
def todos_add_cmd(
    title: str = typer.Argument(..., help="Todo title"),
    due: datetime | None = typer.Option(None, "--due", help="Due date (ISO format)"),
) -> None:
    """Create a todo."""
    commands.todos_add(title=title, due=due)


@todos_app.command("list")
def todos_list_cmd() -> None:
    """List todos, newest first."""
    commands.todos_list()


@todos_app.command("show")
def todos_show_cmd(todo_id: int = typer.Argument(..., help="Todo id")) -> None:
    """Show one todo with its dependencies and dependents."""
    commands.todos_show(todo_id=todo_id)


@todos_app.command("delete")
def todos_delete_cmd(todo_id: int = typer.Argument(..., help="Todo id")) -> None:
    """Delete a todo and its edges."""
    commands.todos_delete(todo_id=todo_id)


@deps_app.command("add")
def deps_add_cmd(
    todo_id: int = typer.Argument(..., help="Dependent todo id"),
    dependency_ids: list[int] = typer.Argument(..., help="Ids the todo depends on"),
) -> None:
    """Add dependencies to a todo."""
    commands.deps_add(todo_id=todo_id, dependency_ids=dependency_ids)


@deps_app.command("remove")
def deps_remove_cmd(
    todo_id: int = typer.Argument(..., help="Dependent todo id"),
    dependency_ids: list[int] = typer.Argument(..., help="Ids to stop depending on"),
) -> None:
    """Remove dependencies from a todo."""
    commands.deps_remove(todo_id=todo_id, dependency_ids=dependency_ids)


@deps_app.command("show")
def deps_show_cmd(todo_id: int = typer.Argument(..., help="Todo id")) -> None:
    """Show a todo's dependencies and dependents."""
    commands.deps_show(todo_id=todo_id)


@graph_app.command("recompute")
def graph_recompute_cmd() -> None:
    """Recompute every earliest start and the critical path."""
    commands.graph_recompute()


@graph_app.command("critical")
def graph_critical_cmd() -> None:
    """Re-mark and list the critical path."""
    commands.graph_critical()


@config_app.command("show")
def config_show_cmd() -> None:
    """Show effective configuration."""
    commands.config_show()


app.add_typer(todos_app, name="todos")
app.add_typer(deps_app, name="deps")
app.add_typer(graph_app, name="graph")
app.add_typer(config_app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
