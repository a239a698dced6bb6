# taskorganizer application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import StartupError
from .repositories.db import ConnectionPool
from .repositories.schema import SchemaManager
from .services.organizer_service import TaskOrganizer
from .services.readiness import DatabaseStatus, wait_for_database
from .utils.config import load_settings, resolve_db_path
from .utils.logging_setup import get_logger
from .utils.paths import ensure_dirs


@dataclass
class AppContext:
    """Central container for shared app resources."""
    db_path: Path
    settings: Dict[str, Any]
    pool: ConnectionPool
    schema: SchemaManager
    status: DatabaseStatus
    organizer: TaskOrganizer

    @classmethod
    def create(cls, db_path: Optional[Path] = None, settings: Optional[Dict[str, Any]] = None) -> "AppContext":
        """Build pool, schema manager, status token and service. Does not touch the DB yet."""
        log = get_logger("AppContext")
        ensure_dirs()
        settings = settings if settings is not None else load_settings()
        db_path = Path(db_path) if db_path is not None else resolve_db_path(settings)
        db_cfg = settings["database"]

        pool = ConnectionPool(db_path, size=int(db_cfg["pool_size"]), busy_timeout_ms=int(db_cfg["busy_timeout_ms"]))
        if db_cfg.get("debug_sql"):
            pool.set_debug_sql(True)
        status = DatabaseStatus()
        organizer = TaskOrganizer(
            pool,
            status,
            default_audit_limit=int(settings["audit"]["default_limit"]),
        )
        log.info("AppContext initialized with DB=%s", db_path)
        return cls(
            db_path=db_path,
            settings=settings,
            pool=pool,
            schema=SchemaManager(pool),
            status=status,
            organizer=organizer,
        )

    def start(self, *, sleep=None) -> int:
        """
        connecting → wait for the probe → ensure schema → connected.
        Any failure moves the status to error and raises StartupError; calling
        start() again after an error retries from connecting.
        Returns the attempt on which the database answered (0 if already connected).
        """
        log = get_logger("AppContext")
        if self.status.state == "connected":
            log.info("start() called while already connected; nothing to do")
            return 0
        if self.status.state == "error":
            self.status.mark_connecting("retrying startup")
        startup = self.settings["startup"]
        kwargs = {"sleep": sleep} if sleep is not None else {}
        try:
            attempt = wait_for_database(
                self.pool.probe,
                max_attempts=int(startup["max_attempts"]),
                delay_s=int(startup["delay_ms"]) / 1000,
                **kwargs,
            )
            self.schema.ensure_schema()
        except StartupError as exc:
            self.status.mark_error(str(exc))
            raise
        except Exception as exc:
            self.status.mark_error(str(exc))
            raise StartupError(f"database initialization failed: {exc}") from exc
        self.status.mark_connected(str(self.db_path))
        return attempt

    def close(self) -> None:
        self.pool.shutdown()
