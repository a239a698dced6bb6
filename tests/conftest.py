# Rev 0.3.0

"""Pytest fixtures for taskorganizer (Rev 0.3.0)"""
from __future__ import annotations
import pytest
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from taskorganizer.repositories.db import ConnectionPool
from taskorganizer.repositories.schema import SchemaManager
from taskorganizer.services.organizer_service import TaskOrganizer
from taskorganizer.services.readiness import DatabaseStatus


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    # QObject signals for status/view models; no GUI needed
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def _isolated_xdg(tmp_path: Path, monkeypatch):
    # keep settings/logs/default DB out of the real home directory
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("TASKORGANIZER_DB", raising=False)


@pytest.fixture()
def pool(tmp_path: Path):
    p = ConnectionPool(tmp_path / "test.db", size=3)
    try:
        yield p
    finally:
        p.shutdown(timeout=5)


@pytest.fixture()
def schema(pool) -> SchemaManager:
    s = SchemaManager(pool)
    s.ensure_schema()
    return s


@pytest.fixture()
def organizer(pool, schema) -> TaskOrganizer:
    status = DatabaseStatus()
    status.mark_connected("test")
    return TaskOrganizer(pool, status)


@pytest.fixture()
def category_id(organizer):
    def _lookup(name: str) -> int:
        for c in organizer.list_categories():
            if c.name == name:
                return c.id
        raise AssertionError(f"category {name!r} not seeded")
    return _lookup


@pytest.fixture()
def table_counts(pool):
    def _counts() -> dict[str, int]:
        return SchemaManager(pool).table_counts()
    return _counts


@pytest.fixture()
def task_count_pairs(pool):
    """category id -> (cached task_count, actual number of referencing tasks)"""
    def _pairs() -> dict[int, tuple[int, int]]:
        with pool.connection() as conn:
            rows = conn.execute(
                """
                SELECT c.id, c.task_count,
                       (SELECT COUNT(*) FROM tasks t WHERE t.category_id = c.id) AS live
                FROM categories c
                """
            ).fetchall()
        return {r["id"]: (r["task_count"], r["live"]) for r in rows}
    return _pairs
