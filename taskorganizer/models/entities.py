# Rev 0.1.0
"""Lightweight entities aligned with the categories / tasks / audit_log schema"""
from __future__ import annotations
import sqlite3
from dataclasses import dataclass
from typing import Optional

from .types import DEFAULT_PRIORITY


@dataclass
class Category:
    id: int
    name: str
    task_count: int = 0
    created_at_utc: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Category":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            task_count=int(row["task_count"]),
            created_at_utc=row["created_at_utc"],
        )


@dataclass
class Task:
    id: int
    title: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    is_completed: bool = False
    priority: str = DEFAULT_PRIORITY
    created_at_utc: Optional[str] = None
    completed_at_utc: Optional[str] = None
    category_name: Optional[str] = None   # only filled by joined listings

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Task":
        keys = row.keys()
        return cls(
            id=int(row["id"]),
            title=row["title"],
            description=row["description"],
            category_id=row["category_id"],
            is_completed=bool(row["is_completed"]),
            priority=row["priority"],
            created_at_utc=row["created_at_utc"],
            completed_at_utc=row["completed_at_utc"],
            category_name=row["category_name"] if "category_name" in keys else None,
        )


@dataclass
class AuditEntry:
    id: int
    action: str
    table_name: str
    record_id: Optional[int]
    details: Optional[str]
    logged_at_utc: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "AuditEntry":
        return cls(
            id=int(row["id"]),
            action=row["action"],
            table_name=row["table_name"],
            record_id=row["record_id"],
            details=row["details"],
            logged_at_utc=row["logged_at_utc"],
        )
