# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Uses XDG Base Directory spec for data/state/config
- DB defaults to $XDG_DATA_HOME/taskorganizer/organizer.db
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "taskorganizer"


def _xdg(var: str, fallback: Path) -> Path:
    return Path(os.environ.get(var, fallback)).expanduser()


def data_dir() -> Path:
    return _xdg("XDG_DATA_HOME", Path.home() / ".local" / "share") / APP_NAME


def state_dir() -> Path:
    return _xdg("XDG_STATE_HOME", Path.home() / ".local" / "state") / APP_NAME


def logs_dir() -> Path:
    return state_dir() / "logs"


def config_dir() -> Path:
    return _xdg("XDG_CONFIG_HOME", Path.home() / ".config") / APP_NAME


def default_db_path() -> Path:
    return data_dir() / "organizer.db"


def ensure_dirs() -> None:
    for p in (data_dir(), logs_dir(), config_dir()):
        p.mkdir(parents=True, exist_ok=True)
