# Rev 0.3.0
from __future__ import annotations

import sqlite3
from typing import List, Optional

from . import task_effects
from .db import ConnectionPool
from .schema import NOW_UTC
from ..errors import MissingReferenceError, ValidationError
from ..models.entities import Task
from ..models.types import DEFAULT_PRIORITY, PRIORITIES

_TASK_COLUMNS = """
    t.id, t.title, t.description, t.category_id, t.is_completed, t.priority,
    t.created_at_utc, t.completed_at_utc
"""


class SQLiteTaskRepository:
    """
    Task CRUD. Every mutation runs in one transaction together with its
    task_effects (category counters + audit_log), so either all of it lands
    or none of it does.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    # -------------------------
    # Validation helpers
    # -------------------------
    @staticmethod
    def _validate(title: str, priority: str) -> None:
        if title is None or not str(title).strip():
            raise ValidationError("task title must not be empty")
        if priority not in PRIORITIES:
            raise ValidationError(f"priority must be one of {', '.join(PRIORITIES)}; got {priority!r}")

    @staticmethod
    def _require_category(conn: sqlite3.Connection, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        row = conn.execute("SELECT 1 FROM categories WHERE id = ?", (category_id,)).fetchone()
        if row is None:
            raise MissingReferenceError(f"category {category_id} does not exist")

    @staticmethod
    def _fetch(conn: sqlite3.Connection, task_id: int) -> Optional[Task]:
        row = conn.execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks t WHERE t.id = ?",
            (task_id,),
        ).fetchone()
        return Task.from_row(row) if row else None

    # -------------------------
    # CRUD
    # -------------------------
    def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        priority: str = DEFAULT_PRIORITY,
    ) -> int:
        self._validate(title, priority)
        with self._pool.transaction() as conn:
            self._require_category(conn, category_id)
            cur = conn.execute(
                "INSERT INTO tasks(title, description, category_id, priority) VALUES (?, ?, ?, ?)",
                (title, description, category_id, priority),
            )
            task = self._fetch(conn, int(cur.lastrowid))
            task_effects.after_task_insert(conn, task)
        return task.id

    def get_task(self, task_id: int) -> Optional[Task]:
        with self._pool.connection() as conn:
            return self._fetch(conn, task_id)

    def update_task(
        self,
        task_id: int,
        title: str,
        description: Optional[str],
        category_id: Optional[int],
        priority: str,
    ) -> int:
        """Edit fields; completion state is left alone. Returns rows affected (0 or 1)."""
        self._validate(title, priority)
        with self._pool.transaction() as conn:
            old = self._fetch(conn, task_id)
            if old is None:
                return 0
            self._require_category(conn, category_id)
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?, description = ?, category_id = ?, priority = ?
                WHERE id = ?
                """,
                (title, description, category_id, priority, task_id),
            )
            new = self._fetch(conn, task_id)
            task_effects.after_task_update(conn, old, new)
            return cur.rowcount

    def complete_task(self, task_id: int) -> int:
        """Mark completed. completed_at_utc is only stamped on the first completion."""
        with self._pool.transaction() as conn:
            old = self._fetch(conn, task_id)
            if old is None:
                return 0
            cur = conn.execute(
                f"""
                UPDATE tasks
                SET completed_at_utc = CASE WHEN is_completed = 0 THEN {NOW_UTC}
                                            ELSE completed_at_utc END,
                    is_completed = 1
                WHERE id = ?
                """,
                (task_id,),
            )
            new = self._fetch(conn, task_id)
            task_effects.after_task_update(conn, old, new)
            return cur.rowcount

    def delete_task(self, task_id: int) -> int:
        with self._pool.transaction() as conn:
            old = self._fetch(conn, task_id)
            if old is None:
                return 0
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            task_effects.after_task_delete(conn, old)
            return cur.rowcount

    # -------------------------
    # Listings
    # -------------------------
    def list_tasks(self) -> List[Task]:
        with self._pool.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_TASK_COLUMNS}, c.name AS category_name
                FROM tasks t
                LEFT JOIN categories c ON c.id = t.category_id
                ORDER BY t.created_at_utc DESC, t.id DESC
                """
            ).fetchall()
        return [Task.from_row(r) for r in rows]

    def list_tasks_by_category(self, category_id: int) -> List[Task]:
        with self._pool.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM tasks t
                WHERE t.category_id = ?
                ORDER BY t.created_at_utc DESC, t.id DESC
                """,
                (category_id,),
            ).fetchall()
        return [Task.from_row(r) for r in rows]

    def count_tasks(self, *, category_id: Optional[int] = None) -> int:
        with self._pool.connection() as conn:
            if category_id is None:
                row = conn.execute("SELECT COUNT(1) FROM tasks").fetchone()
            else:
                row = conn.execute("SELECT COUNT(1) FROM tasks WHERE category_id = ?", (category_id,)).fetchone()
        return int(row[0]) if row and row[0] is not None else 0
