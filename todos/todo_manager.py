"""Todo graph store over SQLite: CRUD, edge mutation and derived attributes."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.orm import Session

from planner.dependency_graph import DependencyGraph, TaskNode
from todos.schemas import TodoRecord, ensure_utc, todo_dependencies
from todos.stores.sql_store import SQLStore
from todos.types import TodoDetail, TodoSummary

logger = logging.getLogger("tg.store")


class TodoManager:
    """Holds todos and their dependency edges with SQLite persistence."""

    def __init__(self, sql_store: SQLStore) -> None:
        self.sql_store = sql_store
        self.sql_store.create_all()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """One unit of work; commits on success and rolls back on error."""
        with self.sql_store.session() as sess:
            yield sess

    def create_todo(
        self,
        title: str,
        due_date: datetime | None = None,
        created_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Insert an independent todo (no edges)."""
        if not title or not title.strip():
            raise ValueError("Title is required.")
        record = TodoRecord(
            title=title.strip(),
            due_date=ensure_utc(due_date),
        )
        if created_at is not None:
            record.created_at = ensure_utc(created_at)
        with self.sql_store.session() as sess:
            sess.add(record)
            sess.flush()
            payload = self._detail(sess, record)
        logger.info("Created todo %s: %s", payload["id"], payload["title"])
        return payload

    def get_todo(self, todo_id: int) -> dict[str, Any] | None:
        """Point lookup with both edge directions expanded."""
        with self.sql_store.session() as sess:
            row = sess.get(TodoRecord, todo_id)
            if row is None:
                return None
            return self._detail(sess, row)

    def list_todos(self) -> list[dict[str, Any]]:
        """All todos, newest first."""
        with self.sql_store.session() as sess:
            rows = sess.scalars(
                select(TodoRecord).order_by(TodoRecord.created_at.desc(), TodoRecord.id.desc())
            ).all()
            return [self._detail(sess, row) for row in rows]

    def delete_todo(self, todo_id: int) -> bool:
        """Delete a todo and every edge touching it."""
        with self.sql_store.session() as sess:
            return self.remove(sess, todo_id)

    def remove(self, sess: Session, todo_id: int) -> bool:
        """Session-scoped delete; False when the id does not exist."""
        row = sess.get(TodoRecord, todo_id)
        if row is None:
            return False
        sess.execute(
            delete(todo_dependencies).where(
                or_(
                    todo_dependencies.c.dependent_id == todo_id,
                    todo_dependencies.c.dependency_id == todo_id,
                )
            )
        )
        sess.delete(row)
        sess.flush()
        logger.info("Deleted todo %s", todo_id)
        return True

    def load_graph(self, sess: Session) -> DependencyGraph:
        """Snapshot every todo and edge as seen by this session."""
        graph = DependencyGraph()
        for row in sess.scalars(select(TodoRecord).order_by(TodoRecord.id)):
            graph.add_node(
                TaskNode(
                    id=row.id,
                    title=row.title,
                    created_at=ensure_utc(row.created_at),
                    due_date=ensure_utc(row.due_date),
                    earliest_start=ensure_utc(row.earliest_start),
                    is_critical=bool(row.is_critical),
                )
            )
        for dependent_id, dependency_id in sess.execute(
            select(todo_dependencies.c.dependent_id, todo_dependencies.c.dependency_id)
        ):
            graph.add_edge(dependent_id, dependency_id)
        return graph

    def connect(self, sess: Session, todo_id: int, dependency_ids: Iterable[int]) -> list[int]:
        """Insert missing edges ``todo_id -> dependency``; returns the new ones."""
        existing = set(
            sess.scalars(
                select(todo_dependencies.c.dependency_id).where(
                    todo_dependencies.c.dependent_id == todo_id
                )
            )
        )
        added = sorted(set(dependency_ids) - existing)
        if added:
            sess.execute(
                insert(todo_dependencies),
                [{"dependent_id": todo_id, "dependency_id": dep_id} for dep_id in added],
            )
        return added

    def disconnect(self, sess: Session, todo_id: int, dependency_ids: Iterable[int]) -> int:
        """Delete edges ``todo_id -> dependency``; absent edges are ignored."""
        targets = sorted(set(dependency_ids))
        if not targets:
            return 0
        result = sess.execute(
            delete(todo_dependencies).where(
                todo_dependencies.c.dependent_id == todo_id,
                todo_dependencies.c.dependency_id.in_(targets),
            )
        )
        return result.rowcount or 0

    def write_derived(
        self,
        sess: Session,
        earliest_starts: dict[int, datetime | None],
        critical_ids: set[int] | None = None,
    ) -> None:
        """Persist derived attributes as one batch inside the caller's transaction."""
        for todo_id, value in earliest_starts.items():
            sess.execute(
                update(TodoRecord)
                .where(TodoRecord.id == todo_id)
                .values(earliest_start=ensure_utc(value))
            )
        if critical_ids is None:
            return
        sess.execute(update(TodoRecord).values(is_critical=False))
        if critical_ids:
            sess.execute(
                update(TodoRecord)
                .where(TodoRecord.id.in_(sorted(critical_ids)))
                .values(is_critical=True)
            )

    def _detail(self, sess: Session, row: TodoRecord) -> dict[str, Any]:
        dependency_rows = sess.scalars(
            select(TodoRecord)
            .join(todo_dependencies, todo_dependencies.c.dependency_id == TodoRecord.id)
            .where(todo_dependencies.c.dependent_id == row.id)
            .order_by(TodoRecord.id)
        ).all()
        dependent_rows = sess.scalars(
            select(TodoRecord)
            .join(todo_dependencies, todo_dependencies.c.dependent_id == TodoRecord.id)
            .where(todo_dependencies.c.dependency_id == row.id)
            .order_by(TodoRecord.id)
        ).all()
        detail = TodoDetail(
            id=row.id,
            title=row.title,
            due_date=ensure_utc(row.due_date),
            earliest_start=ensure_utc(row.earliest_start),
            is_critical=bool(row.is_critical),
            image_url=row.image_url,
            image_id=row.image_id,
            created_at=ensure_utc(row.created_at),
            dependencies=[self._summary(dep) for dep in dependency_rows],
            dependents=[self._summary(dep) for dep in dependent_rows],
        )
        return detail.model_dump()

    @staticmethod
    def _summary(row: TodoRecord) -> TodoSummary:
        return TodoSummary(
            id=row.id,
            title=row.title,
            due_date=ensure_utc(row.due_date),
            earliest_start=ensure_utc(row.earliest_start),
            is_critical=bool(row.is_critical),
        )
