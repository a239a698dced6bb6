# Rev 0.3.0

from __future__ import annotations
import pytest

from taskorganizer.errors import CategoryNotFoundError, ValidationError
from taskorganizer.repositories.sqlite_category_repository import SQLiteCategoryRepository


def _seed_tasks(organizer, cid: int, n: int) -> list[int]:
    return [organizer.create_task(f"task {i}", None, cid) for i in range(n)]


def test_categories_listed_by_name(organizer):
    assert [c.name for c in organizer.list_categories()] == ["Home", "Personal", "Study", "Work"]


def test_create_category(organizer):
    cid = organizer.create_category("Errands")
    cat = organizer.categories.get_category(cid)
    assert (cat.name, cat.task_count) == ("Errands", 0)


@pytest.mark.parametrize("name", ["", "  ", "Work"])
def test_create_category_rejects_empty_or_duplicate(organizer, name):
    with pytest.raises(ValidationError):
        organizer.create_category(name)
    assert len(organizer.list_categories()) == 4


def test_delete_category_with_tasks(organizer, category_id, table_counts):
    work = category_id("Work")
    _seed_tasks(organizer, work, 3)
    other = organizer.create_task("elsewhere", None, category_id("Home"))
    audit_before = table_counts()["audit_log"]

    assert organizer.delete_category_with_tasks(work) is True

    assert organizer.list_tasks_by_category(work) == []
    assert "Work" not in {c.name for c in organizer.list_categories()}
    assert [t.id for t in organizer.list_tasks()] == [other]
    # bulk delete: the per-task DELETE bookkeeping does not run
    assert table_counts()["audit_log"] == audit_before
    assert organizer.audit.count_entries(action="DELETE") == 0


def test_delete_empty_category(organizer, category_id):
    assert organizer.delete_category_with_tasks(category_id("Personal")) is True
    assert len(organizer.list_categories()) == 3


def test_delete_missing_category_returns_false(organizer, table_counts):
    before = table_counts()
    assert organizer.delete_category_with_tasks(9999) is False
    assert table_counts() == before


def test_strict_variant_distinguishes_missing_category(organizer, category_id):
    with pytest.raises(CategoryNotFoundError):
        organizer.delete_category_with_tasks_strict(9999)
    study = category_id("Study")
    _seed_tasks(organizer, study, 2)
    assert organizer.delete_category_with_tasks_strict(study) == 2


def test_failure_between_deletes_rolls_back_everything(organizer, category_id, monkeypatch):
    work = category_id("Work")
    ids = _seed_tasks(organizer, work, 3)
    before_tasks = organizer.list_tasks_by_category(work)

    def boom(conn, cid):
        raise RuntimeError("connection dropped")

    monkeypatch.setattr(SQLiteCategoryRepository, "_delete_category_row", staticmethod(boom))

    assert organizer.delete_category_with_tasks(work) is False
    assert organizer.list_tasks_by_category(work) == before_tasks
    assert sorted(t.id for t in before_tasks) == sorted(ids)
    cats = {c.name: c.task_count for c in organizer.list_categories()}
    assert cats["Work"] == 3


def test_connection_returned_to_pool_after_failure(organizer, pool, monkeypatch):
    def boom(conn, cid):
        raise RuntimeError("boom")

    monkeypatch.setattr(SQLiteCategoryRepository, "_count_tasks_in", staticmethod(boom))
    for _ in range(pool.size + 2):
        assert organizer.delete_category_with_tasks(1) is False
    assert pool.stats()["in_use"] == 0


def test_plain_delete_category_keeps_tasks(organizer, category_id):
    home = category_id("Home")
    tid = organizer.create_task("water plants", None, home)
    assert organizer.delete_category(home) == 1
    task = organizer.get_task(tid)
    assert task is not None
    assert task.category_id is None
