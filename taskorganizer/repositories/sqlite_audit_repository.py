# Rev 0.2.0
from __future__ import annotations

import sqlite3
from typing import List, Optional

from .db import ConnectionPool
from ..models.entities import AuditEntry
from ..models.types import AuditAction


class SQLiteAuditRepository:
    """
    Read side of audit_log. Rows are appended only through append_entry(),
    which task_effects calls on the caller's open transaction.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    def list_audit_log(self, limit: int = 50) -> List[AuditEntry]:
        if limit < 0:
            limit = 0
        with self._pool.connection() as conn:
            rows = conn.execute(
                """
                SELECT id, action, table_name, record_id, details, logged_at_utc
                FROM audit_log
                ORDER BY logged_at_utc DESC, id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [AuditEntry.from_row(r) for r in rows]

    def count_entries(self, *, action: Optional[AuditAction] = None) -> int:
        with self._pool.connection() as conn:
            if action is None:
                row = conn.execute("SELECT COUNT(*) FROM audit_log").fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM audit_log WHERE action = ?", (action,)).fetchone()
        return int(row[0])


def append_entry(
    conn: sqlite3.Connection,
    action: AuditAction,
    table_name: str,
    record_id: Optional[int],
    details: str,
) -> int:
    cur = conn.execute(
        "INSERT INTO audit_log(action, table_name, record_id, details) VALUES (?, ?, ?, ?)",
        (action, table_name, record_id, details),
    )
    return int(cur.lastrowid)
