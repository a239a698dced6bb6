# Rev 0.3.0

"""Schema provisioning (Rev 0.3.0)
- categories / tasks / audit_log, created if absent
- tasks.category_id → categories(id) ON DELETE SET NULL
- default categories seeded with INSERT OR IGNORE
Safe to run on every start.
"""
from __future__ import annotations
from typing import Dict, List, Sequence

from .db import ConnectionPool
from ..utils.logging_setup import get_logger

_log = get_logger("schema")

NOW_UTC = "(strftime('%Y-%m-%d %H:%M:%f', 'now'))"

DEFAULT_CATEGORIES: Sequence[str] = ("Personal", "Work", "Study", "Home")

TABLES = ("categories", "tasks", "audit_log")
INDICES = ("idx_tasks_category", "idx_tasks_completed")

SCHEMA_STATEMENTS: Sequence[str] = (
    f"""
    CREATE TABLE IF NOT EXISTS categories (
        id             INTEGER PRIMARY KEY AUTOINCREMENT,
        name           TEXT    NOT NULL UNIQUE,
        task_count     INTEGER NOT NULL DEFAULT 0,
        created_at_utc TEXT    NOT NULL DEFAULT {NOW_UTC}
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS tasks (
        id               INTEGER PRIMARY KEY AUTOINCREMENT,
        title            TEXT    NOT NULL CHECK (length(trim(title)) > 0),
        description      TEXT,
        category_id      INTEGER REFERENCES categories(id) ON DELETE SET NULL,
        is_completed     INTEGER NOT NULL DEFAULT 0 CHECK (is_completed IN (0, 1)),
        priority         TEXT    NOT NULL DEFAULT 'medium'
                                 CHECK (priority IN ('low', 'medium', 'high')),
        created_at_utc   TEXT    NOT NULL DEFAULT {NOW_UTC},
        completed_at_utc TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(is_completed)",
    f"""
    CREATE TABLE IF NOT EXISTS audit_log (
        id            INTEGER PRIMARY KEY AUTOINCREMENT,
        action        TEXT NOT NULL,
        table_name    TEXT NOT NULL,
        record_id     INTEGER,
        details       TEXT,
        logged_at_utc TEXT NOT NULL DEFAULT {NOW_UTC}
    )
    """,
)


class SchemaManager:
    def __init__(self, pool: ConnectionPool, default_categories: Sequence[str] = DEFAULT_CATEGORIES):
        self._pool = pool
        self._defaults = tuple(default_categories)

    def ensure_schema(self) -> int:
        """Create missing tables/indices and seed default categories. Returns seeds inserted."""
        inserted = 0
        with self._pool.transaction() as conn:
            for stmt in SCHEMA_STATEMENTS:
                conn.execute(stmt)
            for name in self._defaults:
                cur = conn.execute("INSERT OR IGNORE INTO categories(name) VALUES (?)", (name,))
                if cur.rowcount > 0:
                    inserted += 1
                else:
                    _log.debug("Category %r already present", name)
        counts = self.table_counts()
        _log.info(
            "Schema ready (%d default categories inserted); rows: categories=%d tasks=%d audit_log=%d",
            inserted, counts["categories"], counts["tasks"], counts["audit_log"],
        )
        return inserted

    def table_counts(self) -> Dict[str, int]:
        with self._pool.connection() as conn:
            return {
                t: int(conn.execute(f"SELECT COUNT(*) FROM {t}").fetchone()[0])
                for t in TABLES
            }

    def verify(self) -> List[str]:
        """Names of expected tables/indices that are missing (empty list means OK)."""
        with self._pool.connection() as conn:
            present = {
                r["name"] for r in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type IN ('table', 'index')"
                )
            }
        return [name for name in (*TABLES, *INDICES) if name not in present]
