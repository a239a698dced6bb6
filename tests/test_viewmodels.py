# Rev 0.3.0

from __future__ import annotations
import pytest

from taskorganizer.services.organizer_service import TaskOrganizer
from taskorganizer.services.readiness import DatabaseStatus
from taskorganizer.viewmodels.history_viewmodel import HistoryViewModel
from taskorganizer.viewmodels.tasks_viewmodel import TasksViewModel


@pytest.fixture()
def vm(organizer):
    model = TasksViewModel(organizer)
    model.events = []
    model.tasksReloaded.connect(lambda rows: model.events.append(("tasks", rows)))
    model.categoriesReloaded.connect(lambda rows: model.events.append(("categories", rows)))
    model.auditReloaded.connect(lambda rows: model.events.append(("audit", rows)))
    model.errorRaised.connect(lambda msg: model.events.append(("error", msg)))
    return model


def _last(vm, kind):
    return [payload for k, payload in vm.events if k == kind][-1]


def test_save_task_trims_input_and_reloads_views(vm, category_id):
    tid = vm.save_task(title="  Buy milk  ", description="   ", category_id=category_id("Home"))
    assert tid is not None

    (task,) = _last(vm, "tasks")
    assert (task.title, task.description, task.category_name) == ("Buy milk", None, "Home")
    cats = {c.name: c.task_count for c in _last(vm, "categories")}
    assert cats["Home"] == 1
    assert [e.action for e in _last(vm, "audit")] == ["INSERT"]


def test_save_task_edits_existing(vm):
    tid = vm.save_task(title="draft")
    assert vm.save_task(task_id=tid, title="final", priority="high") == tid
    (task,) = _last(vm, "tasks")
    assert (task.title, task.priority) == ("final", "high")


def test_blank_title_reports_error_without_reload(vm):
    assert vm.save_task(title="   ") is None
    assert [k for k, _ in vm.events] == ["error"]


def test_complete_and_delete(vm):
    tid = vm.save_task(title="chore")
    assert vm.complete_task(tid) is True
    assert _last(vm, "tasks")[0].is_completed is True
    assert vm.delete_task(tid) is True
    assert _last(vm, "tasks") == []
    assert vm.delete_task(tid) is False


def test_delete_category_with_tasks(vm, category_id):
    work = category_id("Work")
    vm.save_task(title="a", category_id=work)
    assert vm.delete_category_with_tasks(work) is True
    assert "Work" not in {c.name for c in _last(vm, "categories")}

    vm.events.clear()
    assert vm.delete_category_with_tasks(work) is False
    assert [k for k, _ in vm.events] == ["error"]


def test_create_category_duplicate_reports_error(vm):
    assert vm.create_category("Errands") is not None
    assert vm.create_category("Errands") is None
    assert vm.events[-1][0] == "error"


def test_not_ready_reports_error(pool, schema):
    model = TasksViewModel(TaskOrganizer(pool, DatabaseStatus()))
    errors = []
    model.errorRaised.connect(errors.append)
    assert model.save_task(title="early") is None
    assert len(errors) == 1 and "not ready" in errors[0]


def test_history_viewmodel_labels(organizer):
    tid = organizer.create_task("label me")
    organizer.complete_task(tid)
    history = HistoryViewModel(organizer)
    emitted = []
    history.loaded.connect(emitted.append)

    rows = history.load()
    assert [r["label"] for r in rows] == ["Completed", "Created"]
    assert emitted == [rows]
    assert len(history.load(limit=1)) == 1
