# Rev 0.2.0
# taskorganizer/viewmodels/history_viewmodel.py
from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from ..errors import OrganizerError


class HistoryViewModel(QObject):
    """Audit trail for the history panel, decorated for display."""
    loaded = Signal(list)
    errorRaised = Signal(str)

    _LABELS = {"INSERT": "Created", "COMPLETE": "Completed", "DELETE": "Deleted"}

    def __init__(self, organizer, limit: int = 50):
        super().__init__()
        self._org = organizer
        self._limit = limit

    def load(self, limit: int | None = None) -> list[dict]:
        try:
            entries = self._org.list_audit_log(limit if limit is not None else self._limit)
        except OrganizerError as exc:
            self.errorRaised.emit(str(exc))
            return []
        rows = [
            {
                "id": e.id,
                "action": e.action,
                "label": self._LABELS.get(e.action, e.action),
                "table_name": e.table_name,
                "record_id": e.record_id,
                "details": e.details or "",
                "logged_at_utc": e.logged_at_utc,
            }
            for e in entries
        ]
        self.loaded.emit(rows)
        return rows
