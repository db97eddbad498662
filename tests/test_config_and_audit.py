"""Configuration loading and audit trail tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.config_loader import load_effective_config, load_yaml, merge_dicts
from core.orchestrator import Orchestrator


def test_defaults_apply_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)
    assert config["paths"]["db_path"] == "workspace/todos.db"
    assert config["logging"]["level"] == "INFO"


def test_config_file_overrides_nested_keys(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "default.yaml").write_text(
        "paths:\n  db_path: data/custom.db\nlogging:\n  level: DEBUG\n",
        encoding="utf-8",
    )
    config = load_effective_config(tmp_path)
    assert config["paths"]["db_path"] == "data/custom.db"
    assert config["paths"]["audit_log_path"] == "logs/audit.jsonl"
    assert config["logging"]["level"] == "DEBUG"


def test_non_mapping_config_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(path)


def test_merge_dicts_keeps_unrelated_keys() -> None:
    merged = merge_dicts({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}


def test_dependency_edits_are_audited(tmp_path: Path) -> None:
    bundle = Orchestrator(root=tmp_path).build()
    a = bundle.todos.create_todo("A")["id"]
    b = bundle.todos.create_todo("B")["id"]

    assert bundle.editor.add_dependencies(b, [a]).ok is True
    assert bundle.editor.add_dependencies(a, [b]).ok is False

    audit_path = tmp_path / "logs" / "audit.jsonl"
    events = [json.loads(line) for line in audit_path.read_text(encoding="utf-8").splitlines()]
    assert [event["action"] for event in events] == ["dependencies.added", "dependencies.add"]
    assert events[0]["allowed"] is True
    assert events[0]["outcome"] == "applied"
    assert events[1]["allowed"] is False
    assert events[1]["outcome"] == "cycle_detected"
    assert (tmp_path / "workspace" / "todos.db").exists()
