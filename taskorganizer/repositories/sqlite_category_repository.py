# Rev 0.3.0
from __future__ import annotations

import sqlite3
from typing import List, Optional

from .db import ConnectionPool
from ..errors import CategoryNotFoundError, OrganizerError, ValidationError
from ..models.entities import Category
from ..utils.logging_setup import get_logger

_log = get_logger("categories")


class SQLiteCategoryRepository:
    """
    Thin wrapper around the 'categories' table plus the one explicit
    multi-statement transaction: delete a category together with its tasks.
    task_count is never written here; task_effects owns it.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    # --- public API ---------------------------------------------------------

    def list_categories(self) -> List[Category]:
        with self._pool.connection() as conn:
            rows = conn.execute(
                "SELECT id, name, task_count, created_at_utc FROM categories ORDER BY name"
            ).fetchall()
        return [Category.from_row(r) for r in rows]

    def get_category(self, category_id: int) -> Optional[Category]:
        with self._pool.connection() as conn:
            row = conn.execute(
                "SELECT id, name, task_count, created_at_utc FROM categories WHERE id = ?",
                (category_id,),
            ).fetchone()
        return Category.from_row(row) if row else None

    def create_category(self, name: str) -> int:
        if name is None or not str(name).strip():
            raise ValidationError("category name must not be empty")
        try:
            with self._pool.transaction() as conn:
                cur = conn.execute("INSERT INTO categories(name) VALUES (?)", (name,))
                return int(cur.lastrowid)
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"category {name!r} already exists") from exc

    def delete_category(self, category_id: int) -> int:
        """Remove only the category; its tasks stay, with category_id set to NULL by the FK."""
        with self._pool.transaction() as conn:
            cur = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            return cur.rowcount

    def delete_category_with_tasks_strict(self, category_id: int) -> int:
        """
        Delete every task of the category, then the category, in one transaction.
        Returns the number of tasks deleted. Raises CategoryNotFoundError when the
        category does not exist; any error rolls back both deletes.

        Tasks are removed in bulk, so the per-task effects (counter/audit) of
        delete_task do not run here.
        """
        with self._pool.transaction() as conn:
            pending = self._count_tasks_in(conn, category_id)
            _log.info("Deleting category %s with %d task(s)", category_id, pending)
            deleted = self._delete_tasks_in(conn, category_id)
            self._delete_category_row(conn, category_id)
        _log.info("Category %s deleted together with %d task(s)", category_id, deleted)
        return deleted

    def delete_category_with_tasks(self, category_id: int) -> bool:
        """Boolean form: False means nothing was changed (cause is in the log)."""
        try:
            self.delete_category_with_tasks_strict(category_id)
        except OrganizerError as exc:
            _log.error(
                "ROLLBACK: delete of category %s cancelled (%s: %s)",
                category_id, type(exc).__name__, exc,
            )
            return False
        except Exception:
            _log.exception("ROLLBACK: delete of category %s cancelled by unexpected error", category_id)
            return False
        return True

    # --- transaction steps --------------------------------------------------

    @staticmethod
    def _count_tasks_in(conn: sqlite3.Connection, category_id: int) -> int:
        row = conn.execute("SELECT COUNT(*) FROM tasks WHERE category_id = ?", (category_id,)).fetchone()
        return int(row[0])

    @staticmethod
    def _delete_tasks_in(conn: sqlite3.Connection, category_id: int) -> int:
        return conn.execute("DELETE FROM tasks WHERE category_id = ?", (category_id,)).rowcount

    @staticmethod
    def _delete_category_row(conn: sqlite3.Connection, category_id: int) -> None:
        cur = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        if cur.rowcount == 0:
            raise CategoryNotFoundError(f"category {category_id} does not exist")
