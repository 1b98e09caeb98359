from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .models import TaskEntity
from .repositories import Repository, _merge, new_task_id
from .schemas import TaskCreate, TaskUpdate


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    priority: str = "priority"
    completed: str = "completed"
    due_date: str = "due_date"
    ai_priority: str = "ai_priority"
    ai_reason: str = "ai_reason"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

_WRITABLE = (
    _COLS.title,
    _COLS.description,
    _COLS.priority,
    _COLS.completed,
    _COLS.due_date,
    _COLS.ai_priority,
    _COLS.ai_reason,
    _COLS.updated_at,
)


def _dt_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.
    Every call opens its own connection and commits before returning.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NOT NULL DEFAULT '',
                    {_COLS.priority} TEXT NOT NULL DEFAULT 'medium'
                        CHECK ({_COLS.priority} IN ('urgent', 'high', 'medium', 'low')),
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.due_date} TEXT NULL,
                    {_COLS.ai_priority} TEXT NULL
                        CHECK ({_COLS.ai_priority} IS NULL OR {_COLS.ai_priority} IN ('urgent', 'high', 'medium', 'low')),
                    {_COLS.ai_reason} TEXT NULL,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        def parse_dt(s: Optional[str]) -> Optional[datetime]:
            if s is None:
                return None
            return datetime.fromisoformat(s)

        return {
            "id": str(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "description": row[_COLS.description] or "",
            "priority": str(row[_COLS.priority]),
            "completed": bool(row[_COLS.completed]),
            "due_date": parse_dt(row[_COLS.due_date]),
            "ai_priority": row[_COLS.ai_priority],
            "ai_reason": row[_COLS.ai_reason],
            "created_at": parse_dt(row[_COLS.created_at]),  # type: ignore
            "updated_at": parse_dt(row[_COLS.updated_at]),  # type: ignore
        }

    def _select(self, conn: sqlite3.Connection, task_id: str) -> Optional[TaskEntity]:
        row = conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()
        return self._row_to_entity(row) if row else None

    def create(self, data: TaskCreate) -> TaskEntity:
        now = datetime.now().isoformat()
        new_id = new_task_id()
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.description}, {_COLS.priority},
                    {_COLS.completed}, {_COLS.due_date}, {_COLS.ai_priority}, {_COLS.ai_reason},
                    {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    new_id,
                    data.title,
                    data.description,
                    data.priority,
                    1 if data.completed else 0,
                    _dt_or_none(data.due_date),
                    data.ai_priority,
                    data.ai_reason,
                    now,
                    now,
                ),
            )
            created = self._select(conn, new_id)
            if created is None:
                raise RuntimeError(f"task {new_id} missing right after insert")
            return created

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            return self._select(conn, task_id)

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        with self._conn() as conn:
            current = self._select(conn, task_id)
            if current is None:
                return None
            merged = _merge(current, data.changes(), datetime.now())
            assignments = ", ".join(f"{col} = ?" for col in _WRITABLE)
            conn.execute(
                f"UPDATE {_COLS.table} SET {assignments} WHERE {_COLS.id} = ?",
                (
                    merged["title"],
                    merged["description"],
                    merged["priority"],
                    1 if merged["completed"] else 0,
                    _dt_or_none(merged["due_date"]),
                    merged["ai_priority"],
                    merged["ai_reason"],
                    merged["updated_at"].isoformat(),
                    task_id,
                ),
            )
            return self._select(conn, task_id)

    def delete(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            snapshot = self._select(conn, task_id)
            if snapshot is None:
                return None
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return snapshot

    def list(self) -> List[TaskEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.created_at} DESC, rowid DESC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]
