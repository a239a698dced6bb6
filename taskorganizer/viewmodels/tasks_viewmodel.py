# Rev 0.2.0 — reload every dependent view after a mutation
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..errors import OrganizerError
from ..models.types import DEFAULT_PRIORITY
from ..services.organizer_service import TaskOrganizer


class TasksViewModel(QObject):
    """
    Emits:
      tasksReloaded(list[Task])
      categoriesReloaded(list[Category])
      auditReloaded(list[AuditEntry])
      errorRaised(str)        # rejected input, missing reference, DB not ready ...
    """
    tasksReloaded = Signal(list)
    categoriesReloaded = Signal(list)
    auditReloaded = Signal(list)
    errorRaised = Signal(str)

    def __init__(self, organizer: TaskOrganizer, audit_limit: int = 50):
        super().__init__()
        self._org = organizer
        self._audit_limit = audit_limit

    # ---- queries
    def reload(self) -> None:
        try:
            self.tasksReloaded.emit(self._org.list_tasks())
            self.categoriesReloaded.emit(self._org.list_categories())
            self.auditReloaded.emit(self._org.list_audit_log(self._audit_limit))
        except OrganizerError as exc:
            self.errorRaised.emit(str(exc))

    # ---- commands
    def save_task(
        self,
        *,
        task_id: Optional[int] = None,
        title: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        priority: str = DEFAULT_PRIORITY,
    ) -> Optional[int]:
        """Create when task_id is None, otherwise edit. Returns the task id or None on failure."""
        title = (title or "").strip()
        description = (description or "").strip() or None
        try:
            if task_id is None:
                task_id = self._org.create_task(title, description, category_id, priority)
            elif not self._org.update_task(task_id, title, description, category_id, priority):
                self.errorRaised.emit(f"task {task_id} no longer exists")
                task_id = None
        except OrganizerError as exc:
            self.errorRaised.emit(str(exc))
            return None
        self.reload()
        return task_id

    def complete_task(self, task_id: int) -> bool:
        return self._mutate(lambda: self._org.complete_task(task_id) > 0)

    def delete_task(self, task_id: int) -> bool:
        return self._mutate(lambda: self._org.delete_task(task_id) > 0)

    def create_category(self, name: str) -> Optional[int]:
        try:
            cid = self._org.create_category((name or "").strip())
        except OrganizerError as exc:
            self.errorRaised.emit(str(exc))
            return None
        self.reload()
        return cid

    def delete_category_with_tasks(self, category_id: int) -> bool:
        try:
            ok = self._org.delete_category_with_tasks(category_id)
        except OrganizerError as exc:
            self.errorRaised.emit(str(exc))
            return False
        if ok:
            self.reload()
        else:
            self.errorRaised.emit(f"category {category_id} could not be deleted; nothing was changed")
        return ok

    # ---- internals
    def _mutate(self, op) -> bool:
        try:
            ok = bool(op())
        except OrganizerError as exc:
            self.errorRaised.emit(str(exc))
            return False
        if ok:
            self.reload()
        return ok
