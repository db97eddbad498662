"""Top-level application orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.config_loader import ensure_runtime_dirs, load_effective_config
from core.event_bus import ALL_EVENTS, EventBus
from governance.audit_logger import AuditLogger
from planner.dependency_editor import DependencyEditor
from todos.stores.sql_store import SQLStore
from todos.todo_manager import TodoManager


@dataclass
class RuntimeBundle:
    """Holds initialized runtime components."""

    config: dict[str, Any]
    todos: TodoManager
    editor: DependencyEditor
    event_bus: EventBus
    audit_logger: AuditLogger


class Orchestrator:
    """Creates and wires runtime components for CLI use."""

    def __init__(self, root: Path | None = None) -> None:
        default_root = Path(__file__).resolve().parents[1]
        self.root = (root or default_root).resolve()

    def build(self) -> RuntimeBundle:
        config = load_effective_config(self.root)
        paths = ensure_runtime_dirs(self.root, config)

        sql_store = SQLStore(paths["db_path"])
        sql_store.create_all()
        todos = TodoManager(sql_store=sql_store)

        event_bus = EventBus()
        audit_logger = AuditLogger(paths["audit_log_path"])
        event_bus.subscribe(ALL_EVENTS, audit_logger.record_event)

        editor = DependencyEditor(todo_manager=todos, event_bus=event_bus)
        return RuntimeBundle(
            config=config,
            todos=todos,
            editor=editor,
            event_bus=event_bus,
            audit_logger=audit_logger,
        )
