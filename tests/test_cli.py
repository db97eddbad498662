"""Command line tests."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from core.orchestrator import Orchestrator
from ui.cli.cli import app

runner = CliRunner()


def _root(tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "default.yaml").write_text("logging:\n  level: WARNING\n", encoding="utf-8")
    return tmp_path


def _invoke(root: Path, *args: str):
    return runner.invoke(app, ["--root", str(root), *args])


def test_dependency_workflow(tmp_path: Path) -> None:
    root = _root(tmp_path)
    assert _invoke(root, "todos", "add", "Pour foundation", "--due", "2099-01-05").exit_code == 0
    assert _invoke(root, "todos", "add", "Frame walls").exit_code == 0

    result = _invoke(root, "deps", "add", "2", "1")
    assert result.exit_code == 0
    assert "Dependencies added successfully." in result.output
    assert "Earliest start: 2099-01-05" in result.output

    todos = Orchestrator(root=root).build().todos
    frame = todos.get_todo(2)
    assert [dep["id"] for dep in frame["dependencies"]] == [1]
    assert frame["is_critical"] is True

    shown = _invoke(root, "deps", "show", "1")
    assert shown.exit_code == 0
    assert "Frame walls" in shown.output


def test_rejections_exit_non_zero(tmp_path: Path) -> None:
    root = _root(tmp_path)
    _invoke(root, "todos", "add", "A")
    _invoke(root, "todos", "add", "B")
    _invoke(root, "deps", "add", "2", "1")

    self_ref = _invoke(root, "deps", "add", "1", "1")
    assert self_ref.exit_code == 1
    assert "self_dependency" in self_ref.output

    cycle = _invoke(root, "deps", "add", "1", "2")
    assert cycle.exit_code == 1
    assert "cycle_detected" in cycle.output

    missing = _invoke(root, "todos", "show", "42")
    assert missing.exit_code == 1


def test_remove_and_recompute(tmp_path: Path) -> None:
    root = _root(tmp_path)
    _invoke(root, "todos", "add", "A")
    _invoke(root, "todos", "add", "B")
    _invoke(root, "deps", "add", "2", "1")

    removed = _invoke(root, "deps", "remove", "2", "1")
    assert removed.exit_code == 0
    assert "Dependencies removed successfully." in removed.output

    recomputed = _invoke(root, "graph", "recompute")
    assert recomputed.exit_code == 0
    assert "Critical path: 1, 2" in recomputed.output

    critical = _invoke(root, "graph", "critical")
    assert critical.exit_code == 0
    assert "[1, 2]" in critical.output


def test_delete_and_config_show(tmp_path: Path) -> None:
    root = _root(tmp_path)
    _invoke(root, "todos", "add", "A")

    deleted = _invoke(root, "todos", "delete", "1")
    assert deleted.exit_code == 0
    assert "Todo 1 deleted." in deleted.output
    assert _invoke(root, "todos", "delete", "1").exit_code == 1

    shown = _invoke(root, "config", "show")
    assert shown.exit_code == 0
    assert "WARNING" in shown.output


def test_critical_path_cycle_exits_with_error(tmp_path: Path) -> None:
    root = _root(tmp_path)
    for title in ("A", "B", "C"):
        _invoke(root, "todos", "add", title)
    todos = Orchestrator(root=root).build().todos
    with todos.transaction() as sess:
        todos.connect(sess, 3, [1])
        todos.connect(sess, 1, [2])
        todos.connect(sess, 2, [1])

    result = _invoke(root, "graph", "critical")
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error (cycle_invariant_violated)" in result.output
    assert "1 -> 2 -> 1" in result.output

    audit_lines = (root / "logs" / "audit.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(audit_lines[-1])["outcome"] == "degraded"
