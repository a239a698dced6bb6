# Rev 0.2.0

"""Database readiness (Rev 0.2.0)
- DatabaseStatus: one shared state token (connecting → connected | error)
  that every mutating operation checks before touching the store
- wait_for_database: bounded, fixed-delay retry of a connectivity probe
"""
from __future__ import annotations
import logging
import threading
import time
from typing import Any, Callable, Dict, FrozenSet

from PySide6.QtCore import QObject, Signal
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..errors import DatabaseNotReadyError, StartupError, TransientConnectivityError
from ..models.types import DbState
from ..utils.logging_setup import get_logger

_log = get_logger("readiness")


class DatabaseStatus(QObject):
    """
    Emits:
      statusChanged(state: str, message: str)
    """
    statusChanged = Signal(str, str)

    _TRANSITIONS: Dict[str, FrozenSet[str]] = {
        "connecting": frozenset({"connected", "error"}),
        "error": frozenset({"connecting"}),    # explicit retry
        "connected": frozenset(),
    }

    def __init__(self):
        super().__init__()
        self._lock = threading.Lock()
        self._state: DbState = "connecting"
        self._message = ""

    @property
    def state(self) -> DbState:
        return self._state

    @property
    def message(self) -> str:
        return self._message

    def is_ready(self) -> bool:
        return self._state == "connected"

    def _move(self, state: DbState, message: str) -> None:
        with self._lock:
            if state not in self._TRANSITIONS[self._state]:
                raise ValueError(f"invalid database status transition {self._state} -> {state}")
            self._state, self._message = state, message
        _log.info("Database status: %s %s", state, message)
        self.statusChanged.emit(state, message)

    def mark_connected(self, message: str = "") -> None:
        self._move("connected", message)

    def mark_error(self, message: str) -> None:
        self._move("error", message)

    def mark_connecting(self, message: str = "") -> None:
        self._move("connecting", message)

    def require_ready(self, operation: str) -> None:
        if not self.is_ready():
            raise DatabaseNotReadyError(f"database not ready ({self._state}) for: {operation}")


def wait_for_database(
    probe: Callable[[], Any],
    *,
    max_attempts: int = 30,
    delay_s: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Call `probe` until it succeeds, retrying TransientConnectivityError with a
    fixed delay. Returns the attempt that succeeded; raises StartupError once
    max_attempts are used up. Other exceptions propagate immediately.
    """
    attempts = 0

    def _attempt() -> Any:
        nonlocal attempts
        attempts += 1
        _log.info("Attempt %d/%d: checking database", attempts, max_attempts)
        return probe()

    retryer = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay_s),
        retry=retry_if_exception_type(TransientConnectivityError),
        before_sleep=before_sleep_log(_log, logging.WARNING),
        sleep=sleep,
    )
    try:
        retryer(_attempt)
    except RetryError as exc:
        last = exc.last_attempt.exception()
        raise StartupError(
            f"could not reach the database after {max_attempts} attempts: {last}"
        ) from last
    _log.info("Database verified on attempt %d", attempts)
    return attempts
