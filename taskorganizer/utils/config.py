# Rev 0.2.0
# taskorganizer/utils/config.py
from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .paths import config_dir, default_db_path

DB_ENV = "TASKORGANIZER_DB"

_DEFAULTS: Dict[str, Any] = {
    "database": {
        "path": None,            # None -> XDG data dir
        "pool_size": 5,
        "busy_timeout_ms": 5000,
        "debug_sql": False,
    },
    "startup": {
        "max_attempts": 30,
        "delay_ms": 500,
    },
    "audit": {
        "default_limit": 50,
    },
}


def settings_file() -> Path:
    return config_dir() / "settings.json"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    if path.exists():
        try:
            return _merge(_DEFAULTS, json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError):
            logging.getLogger(__name__).warning("Unreadable settings file %s; using defaults", path)
            return copy.deepcopy(_DEFAULTS)
    return copy.deepcopy(_DEFAULTS)


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def resolve_db_path(settings: Dict[str, Any]) -> Path:
    """Env var wins, then settings.json, then the XDG default."""
    env = os.environ.get(DB_ENV)
    if env:
        return Path(env).expanduser()
    configured = settings.get("database", {}).get("path")
    if configured:
        return Path(configured).expanduser()
    return default_db_path()
