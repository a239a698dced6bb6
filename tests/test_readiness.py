# Rev 0.3.0

from __future__ import annotations
import pytest

from taskorganizer.app_context import AppContext
from taskorganizer.errors import DatabaseNotReadyError, StartupError, TransientConnectivityError
from taskorganizer.services.organizer_service import TaskOrganizer
from taskorganizer.services.readiness import DatabaseStatus, wait_for_database
from taskorganizer.utils.config import load_settings


class _FlakyProbe:
    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientConnectivityError("not yet")
        return {"ok": True}


def test_wait_succeeds_after_retries():
    probe = _FlakyProbe(failures=2)
    sleeps: list[float] = []
    attempt = wait_for_database(probe, max_attempts=5, delay_s=0.5, sleep=sleeps.append)
    assert attempt == 3
    assert probe.calls == 3
    assert sleeps == [0.5, 0.5]


def test_wait_gives_up_after_max_attempts():
    probe = _FlakyProbe(failures=100)
    sleeps: list[float] = []
    with pytest.raises(StartupError) as exc:
        wait_for_database(probe, max_attempts=4, delay_s=0.25, sleep=sleeps.append)
    assert probe.calls == 4
    assert len(sleeps) == 3
    assert isinstance(exc.value.__cause__, TransientConnectivityError)


def test_wait_does_not_retry_unexpected_errors():
    calls = []

    def probe():
        calls.append(1)
        raise ValueError("misconfigured")

    with pytest.raises(ValueError):
        wait_for_database(probe, max_attempts=5, delay_s=0, sleep=lambda s: None)
    assert len(calls) == 1


def test_status_transitions_emit_signal():
    status = DatabaseStatus()
    seen = []
    status.statusChanged.connect(lambda state, msg: seen.append((state, msg)))

    assert status.state == "connecting"
    status.mark_error("boom")
    status.mark_connecting("retry")
    status.mark_connected("organizer.db")
    assert status.is_ready()
    assert seen == [("error", "boom"), ("connecting", "retry"), ("connected", "organizer.db")]


def test_status_rejects_invalid_transition():
    status = DatabaseStatus()
    status.mark_connected()
    with pytest.raises(ValueError):
        status.mark_error("late failure")
    assert status.state == "connected"


def test_mutations_gated_until_connected(pool, schema, table_counts):
    organizer = TaskOrganizer(pool, DatabaseStatus())
    with pytest.raises(DatabaseNotReadyError):
        organizer.create_task("too early")
    with pytest.raises(DatabaseNotReadyError):
        organizer.delete_category_with_tasks(1)
    assert table_counts()["tasks"] == 0
    # reads are not gated
    assert len(organizer.list_categories()) == 4


def test_health_check(organizer, pool):
    assert organizer.health_check() is True
    pool.shutdown()
    assert organizer.health_check() is False


def test_app_context_start(tmp_path):
    ctx = AppContext.create(db_path=tmp_path / "app.db", settings=load_settings())
    try:
        assert ctx.start() == 1
        assert ctx.status.state == "connected"
        assert ctx.schema.verify() == []
        tid = ctx.organizer.create_task("hello")
        assert ctx.organizer.get_task(tid).title == "hello"
    finally:
        ctx.close()


def test_app_context_start_failure_marks_error(tmp_path):
    settings = load_settings()
    settings["startup"].update(max_attempts=3, delay_ms=0)
    ctx = AppContext.create(db_path=tmp_path, settings=settings)   # directory, cannot open
    try:
        with pytest.raises(StartupError):
            ctx.start(sleep=lambda s: None)
        assert ctx.status.state == "error"
        with pytest.raises(DatabaseNotReadyError):
            ctx.organizer.create_task("nope")
    finally:
        ctx.close()


def test_app_context_repeated_failure_keeps_startup_error(tmp_path):
    settings = load_settings()
    settings["startup"].update(max_attempts=2, delay_ms=0)
    ctx = AppContext.create(db_path=tmp_path, settings=settings)
    try:
        for _ in range(2):
            with pytest.raises(StartupError):
                ctx.start(sleep=lambda s: None)
            assert ctx.status.state == "error"
    finally:
        ctx.close()


def test_app_context_start_retries_after_failure(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory", encoding="utf-8")
    settings = load_settings()
    settings["startup"].update(max_attempts=2, delay_ms=0)
    ctx = AppContext.create(db_path=blocker / "app.db", settings=settings)
    seen = []
    ctx.status.statusChanged.connect(lambda state, msg: seen.append(state))
    try:
        with pytest.raises(StartupError):
            ctx.start(sleep=lambda s: None)
        blocker.unlink()

        assert ctx.start(sleep=lambda s: None) == 1
        assert ctx.status.state == "connected"
        assert seen == ["error", "connecting", "connected"]
        assert ctx.start() == 0
        assert ctx.status.state == "connected"
    finally:
        ctx.close()
