# Rev 0.3.0

"""Task side effects (Rev 0.3.0)
Counter and audit bookkeeping that must commit or roll back together with the
task mutation that caused it. Every function runs on the caller's open
transaction and raises on failure; nothing here commits.

    insert            → categories.task_count += 1, audit INSERT
    update (0 → 1)    → audit COMPLETE
    update (category) → move one count from old to new category
    delete            → categories.task_count -= 1, audit DELETE
"""
from __future__ import annotations
import sqlite3
from typing import Optional

from .sqlite_audit_repository import append_entry
from ..errors import TransactionIntegrityError
from ..models.entities import Task
from ..utils.logging_setup import get_logger

_log = get_logger("task_effects")

TASKS_TABLE = "tasks"


def _adjust_task_count(conn: sqlite3.Connection, category_id: Optional[int], delta: int) -> None:
    if category_id is None:
        return
    cur = conn.execute(
        "UPDATE categories SET task_count = task_count + ? WHERE id = ?",
        (delta, category_id),
    )
    if cur.rowcount != 1:
        raise TransactionIntegrityError(
            f"task_count update for category {category_id} matched {cur.rowcount} rows"
        )


def after_task_insert(conn: sqlite3.Connection, task: Task) -> None:
    _adjust_task_count(conn, task.category_id, +1)
    append_entry(conn, "INSERT", TASKS_TABLE, task.id, f"Task created: {task.title}")
    _log.debug("insert effects applied for task %s", task.id)


def after_task_update(conn: sqlite3.Connection, old: Task, new: Task) -> None:
    if old.category_id != new.category_id:
        _adjust_task_count(conn, old.category_id, -1)
        _adjust_task_count(conn, new.category_id, +1)
    if new.is_completed and not old.is_completed:
        append_entry(conn, "COMPLETE", TASKS_TABLE, new.id, f"Task completed: {new.title}")
    _log.debug("update effects applied for task %s", new.id)


def after_task_delete(conn: sqlite3.Connection, old: Task) -> None:
    _adjust_task_count(conn, old.category_id, -1)
    append_entry(conn, "DELETE", TASKS_TABLE, old.id, f"Task deleted: {old.title}")
    _log.debug("delete effects applied for task %s", old.id)
