# Rev 0.3.0

"""SQLite connection pool (Rev 0.3.0)
- WAL mode, foreign_keys=ON, busy_timeout on every connection
- isolation_level=None: transactions are explicit (BEGIN IMMEDIATE / COMMIT / ROLLBACK)
- Bounded pool, lazily opened; waiters block on a condition, no queue limit
"""
from __future__ import annotations
import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set

from ..errors import PoolClosedError, TransientConnectivityError
from ..utils.logging_setup import get_logger

_log = get_logger("db")
_sql_log = get_logger("sql")


class ConnectionPool:
    def __init__(self, path: Path | str, size: int = 5, *, busy_timeout_ms: int = 5000) -> None:
        if size < 1:
            raise ValueError("pool size must be >= 1")
        self.path = Path(path)
        self.size = size
        self.busy_timeout_ms = busy_timeout_ms

        self._cond = threading.Condition()
        self._free: List[sqlite3.Connection] = []
        self._in_use: Set[sqlite3.Connection] = set()
        self._opened = 0           # open + reserved-while-opening
        self._closed = False
        self._debug_sql = False
        _log.info("Pool created for %s (size=%d)", self.path, size)

    # -------------------------
    # Connection lifecycle
    # -------------------------
    def _open(self) -> sqlite3.Connection:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                self.path,
                isolation_level=None,
                check_same_thread=False,
                timeout=self.busy_timeout_ms / 1000,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON;")
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)};")
        except (sqlite3.Error, OSError) as exc:
            raise TransientConnectivityError(f"cannot open database {self.path}: {exc}") from exc
        if self._debug_sql:
            conn.set_trace_callback(_sql_log.debug)
        _log.debug("Opened connection to %s", self.path)
        return conn

    def acquire(self, timeout: Optional[float] = None) -> sqlite3.Connection:
        """Borrow a connection, blocking until one is free. Pair with release()."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                if self._closed:
                    raise PoolClosedError("connection pool is shut down")
                if self._free:
                    conn = self._free.pop()
                    self._in_use.add(conn)
                    return conn
                if self._opened < self.size:
                    self._opened += 1
                    break
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise TransientConnectivityError(
                        f"timed out after {timeout}s waiting for a pooled connection"
                    )
                self._cond.wait(remaining)

        # slot reserved; open outside the lock
        try:
            conn = self._open()
        except BaseException:
            with self._cond:
                self._opened -= 1
                self._cond.notify_all()
            raise
        with self._cond:
            if self._closed:
                self._opened -= 1
                self._cond.notify_all()
                conn.close()
                raise PoolClosedError("connection pool is shut down")
            self._in_use.add(conn)
        return conn

    def release(self, conn: sqlite3.Connection) -> None:
        with self._cond:
            if conn not in self._in_use:
                raise ValueError("connection is not borrowed from this pool (double release?)")
            self._in_use.discard(conn)
            if conn.in_transaction:
                _log.warning("Connection released inside an open transaction; rolling back")
                conn.rollback()
            if self._closed:
                conn.close()
                self._opened -= 1
            else:
                self._free.append(conn)
            self._cond.notify_all()

    @contextmanager
    def connection(self, timeout: Optional[float] = None) -> Iterator[sqlite3.Connection]:
        conn = self.acquire(timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    @contextmanager
    def transaction(self, timeout: Optional[float] = None) -> Iterator[sqlite3.Connection]:
        """One atomic unit on one borrowed connection: COMMIT on success, ROLLBACK on any error."""
        with self.connection(timeout) as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.OperationalError as exc:
                raise TransientConnectivityError(f"cannot begin transaction: {exc}") from exc
            try:
                yield conn
            except sqlite3.OperationalError as exc:
                self._rollback(conn)
                raise TransientConnectivityError(str(exc)) from exc
            except BaseException:
                self._rollback(conn)
                raise
            else:
                try:
                    conn.execute("COMMIT")
                except sqlite3.OperationalError as exc:
                    self._rollback(conn)
                    raise TransientConnectivityError(f"commit failed: {exc}") from exc

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error:
            _log.exception("ROLLBACK failed")

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Refuse new borrows, wait for outstanding ones, close everything."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            if self._closed and not self._free and not self._in_use:
                return
            self._closed = True
            self._cond.notify_all()
            while self._in_use:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    _log.warning(
                        "Shutdown timed out with %d connection(s) still borrowed; "
                        "they will be closed on release", len(self._in_use)
                    )
                    break
                self._cond.wait(remaining)
            for conn in self._free:
                conn.close()
                self._opened -= 1
            self._free.clear()
        _log.info("Pool for %s shut down", self.path)

    close = shutdown

    # -------------------------
    # Diagnostics
    # -------------------------
    def probe(self) -> Dict[str, Any]:
        """Trivial round trip. Raises TransientConnectivityError when the DB does not answer."""
        try:
            with self.connection() as conn:
                (result,) = conn.execute("SELECT 1 + 1").fetchone()
                (version,) = conn.execute("SELECT sqlite_version()").fetchone()
                tables = [
                    r[0] for r in conn.execute(
                        "SELECT name FROM sqlite_master WHERE type='table' "
                        "AND name NOT LIKE 'sqlite_%' ORDER BY name"
                    )
                ]
        except sqlite3.Error as exc:
            raise TransientConnectivityError(f"probe failed: {exc}") from exc
        if result != 2:
            raise TransientConnectivityError(f"probe returned unexpected result {result!r}")
        return {"path": str(self.path), "sqlite_version": version, "tables": tables}

    def set_debug_sql(self, enabled: bool) -> None:
        """Log every executed statement on the taskorganizer.sql logger."""
        with self._cond:
            self._debug_sql = enabled
            callback = _sql_log.debug if enabled else None
            for conn in (*self._free, *self._in_use):
                conn.set_trace_callback(callback)
        _log.info("SQL debug logging %s", "enabled" if enabled else "disabled")

    def stats(self) -> Dict[str, int]:
        with self._cond:
            return {
                "size": self.size,
                "open": self._opened,
                "in_use": len(self._in_use),
                "free": len(self._free),
            }

    @property
    def closed(self) -> bool:
        return self._closed
