"""SQLAlchemy schemas for todos and their dependency edges."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Return UTC datetime for default timestamps."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values read back from SQLite, convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Base(DeclarativeBase):
    """Declarative base."""


class TodoRecord(Base):
    """Todo table."""

    __tablename__ = "todos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)
    earliest_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_critical: Mapped[bool] = mapped_column(Boolean, default=False)


# Many-to-many edge table: dependent_id depends on dependency_id.
todo_dependencies = Table(
    "todo_dependencies",
    Base.metadata,
    Column(
        "dependent_id",
        Integer,
        ForeignKey("todos.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "dependency_id",
        Integer,
        ForeignKey("todos.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
