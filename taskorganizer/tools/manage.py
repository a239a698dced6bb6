# File: taskorganizer/tools/manage.py
# Usage examples:
#   python -m taskorganizer.tools.manage init
#   python -m taskorganizer.tools.manage status
#   python -m taskorganizer.tools.manage audit --limit 20
#   python -m taskorganizer.tools.manage health --db /path/to/organizer.db
#
# Notes:
# - DB path defaults to env TASKORGANIZER_DB, then settings.json, then the XDG data dir
# - init waits for the DB (bounded retries), provisions the schema and seeds categories

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from ..app_context import AppContext
from ..errors import OrganizerError, StartupError
from ..utils.config import load_settings
from ..utils.logging_setup import setup_logging


def _context(db: Optional[Path]) -> AppContext:
    return AppContext.create(db_path=db, settings=load_settings())


def cmd_init(db: Optional[Path]) -> int:
    ctx = _context(db)
    try:
        attempt = ctx.start()
        print(f"✓ Database ready at {ctx.db_path} (attempt {attempt}).")
        return 0
    except StartupError as exc:
        print(f"❌ {exc}")
        return 2
    finally:
        ctx.close()


def cmd_status(db: Optional[Path]) -> int:
    ctx = _context(db)
    try:
        info = ctx.pool.probe()
        print(f"DB: {info['path']}")
        print(f"SQLite: {info['sqlite_version']}")
        print(f"Tables: {', '.join(info['tables']) or '(none)'}")
        if not ctx.schema.verify():
            for table, count in ctx.schema.table_counts().items():
                print(f"  {table}: {count}")
        return 0
    except OrganizerError as exc:
        print(f"❌ {exc}")
        return 2
    finally:
        ctx.close()


def cmd_verify(db: Optional[Path]) -> int:
    ctx = _context(db)
    if not ctx.db_path.exists():
        print(f"❌ Database file not found: {ctx.db_path}")
        ctx.close()
        return 4
    try:
        missing = ctx.schema.verify()
        if missing:
            print("❌ Missing schema objects:", ", ".join(missing))
            return 3
        print("✓ Verification passed.")
        return 0
    finally:
        ctx.close()


def cmd_audit(db: Optional[Path], limit: int) -> int:
    ctx = _context(db)
    try:
        ctx.start()
        for e in ctx.organizer.list_audit_log(limit):
            print(f"{e.logged_at_utc}  {e.action:<8} {e.table_name}#{e.record_id}  {e.details or ''}")
        return 0
    except OrganizerError as exc:
        print(f"❌ {exc}")
        return 2
    finally:
        ctx.close()


def cmd_health(db: Optional[Path]) -> int:
    ctx = _context(db)
    try:
        ok = ctx.organizer.health_check()
        print("✓ healthy" if ok else "❌ unhealthy")
        return 0 if ok else 1
    finally:
        ctx.close()


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="taskorganizer-manage", description="Task organizer database tools")
    p.add_argument("--db", type=Path, default=None, help="Path to SQLite DB (default: $TASKORGANIZER_DB or XDG data dir)")
    p.add_argument("--quiet", action="store_true", help="Log to file only")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init", help="Wait for the DB, create schema and seed default categories")
    sub.add_parser("status", help="Probe the DB and show row counts")
    sub.add_parser("verify", help="Check that tables and indices exist")
    s_audit = sub.add_parser("audit", help="Print the newest audit entries")
    s_audit.add_argument("--limit", type=int, default=50)
    sub.add_parser("health", help="Round-trip health check (exit 1 when unhealthy)")

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(console=not ns.quiet)
    if ns.cmd == "init":
        return cmd_init(ns.db)
    if ns.cmd == "status":
        return cmd_status(ns.db)
    if ns.cmd == "verify":
        return cmd_verify(ns.db)
    if ns.cmd == "audit":
        return cmd_audit(ns.db, ns.limit)
    if ns.cmd == "health":
        return cmd_health(ns.db)
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
