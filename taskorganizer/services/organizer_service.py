# Rev 0.3.0

"""TaskOrganizer service (Rev 0.3.0)
Single entry point the UI collaborator talks to. Mutations are gated on the
shared DatabaseStatus; failures are logged here and re-raised, except where
the contract is a boolean (health_check, delete_category_with_tasks).
"""
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, List, Optional

from ..errors import MissingReferenceError, ValidationError
from ..models.entities import AuditEntry, Category, Task
from ..models.types import DEFAULT_PRIORITY
from ..repositories.db import ConnectionPool
from ..repositories.sqlite_audit_repository import SQLiteAuditRepository
from ..repositories.sqlite_category_repository import SQLiteCategoryRepository
from ..repositories.sqlite_task_repository import SQLiteTaskRepository
from ..utils.logging_setup import get_logger
from .readiness import DatabaseStatus

_log = get_logger("organizer")


class TaskOrganizer:
    def __init__(
        self,
        pool: ConnectionPool,
        status: DatabaseStatus,
        *,
        tasks: Optional[SQLiteTaskRepository] = None,
        categories: Optional[SQLiteCategoryRepository] = None,
        audit: Optional[SQLiteAuditRepository] = None,
        default_audit_limit: int = 50,
    ):
        self._pool = pool
        self._status = status
        self.tasks = tasks or SQLiteTaskRepository(pool)
        self.categories = categories or SQLiteCategoryRepository(pool)
        self.audit = audit or SQLiteAuditRepository(pool)
        self._default_audit_limit = default_audit_limit

    @property
    def status(self) -> DatabaseStatus:
        return self._status

    @contextmanager
    def _operation(self, name: str, *, mutating: bool) -> Iterator[None]:
        if mutating:
            self._status.require_ready(name)
        try:
            yield
        except (ValidationError, MissingReferenceError) as exc:
            _log.warning("%s rejected: %s", name, exc)
            raise
        except Exception:
            _log.exception("%s failed", name)
            raise

    # ---- tasks
    def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        priority: str = DEFAULT_PRIORITY,
    ) -> int:
        with self._operation("create_task", mutating=True):
            task_id = self.tasks.create_task(title, description, category_id, priority)
        _log.info("Task %d created", task_id)
        return task_id

    def list_tasks(self) -> List[Task]:
        with self._operation("list_tasks", mutating=False):
            return self.tasks.list_tasks()

    def list_tasks_by_category(self, category_id: int) -> List[Task]:
        with self._operation("list_tasks_by_category", mutating=False):
            return self.tasks.list_tasks_by_category(category_id)

    def get_task(self, task_id: int) -> Optional[Task]:
        with self._operation("get_task", mutating=False):
            return self.tasks.get_task(task_id)

    def update_task(
        self,
        task_id: int,
        title: str,
        description: Optional[str],
        category_id: Optional[int],
        priority: str,
    ) -> int:
        with self._operation("update_task", mutating=True):
            return self.tasks.update_task(task_id, title, description, category_id, priority)

    def complete_task(self, task_id: int) -> int:
        with self._operation("complete_task", mutating=True):
            return self.tasks.complete_task(task_id)

    def delete_task(self, task_id: int) -> int:
        with self._operation("delete_task", mutating=True):
            return self.tasks.delete_task(task_id)

    # ---- categories
    def list_categories(self) -> List[Category]:
        with self._operation("list_categories", mutating=False):
            return self.categories.list_categories()

    def create_category(self, name: str) -> int:
        with self._operation("create_category", mutating=True):
            return self.categories.create_category(name)

    def delete_category(self, category_id: int) -> int:
        with self._operation("delete_category", mutating=True):
            return self.categories.delete_category(category_id)

    def delete_category_with_tasks(self, category_id: int) -> bool:
        with self._operation("delete_category_with_tasks", mutating=True):
            return self.categories.delete_category_with_tasks(category_id)

    def delete_category_with_tasks_strict(self, category_id: int) -> int:
        with self._operation("delete_category_with_tasks", mutating=True):
            return self.categories.delete_category_with_tasks_strict(category_id)

    # ---- audit
    def list_audit_log(self, limit: Optional[int] = None) -> List[AuditEntry]:
        with self._operation("list_audit_log", mutating=False):
            return self.audit.list_audit_log(self._default_audit_limit if limit is None else limit)

    # ---- health
    def health_check(self) -> bool:
        try:
            with self._pool.connection() as conn:
                (status,) = conn.execute("SELECT 1").fetchone()
            return status == 1
        except Exception as exc:
            _log.error("health_check failed: %s", exc)
            return False
