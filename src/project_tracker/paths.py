"""Helpers for locating application directories."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs


APP_NAME = "ProjectTracker"
APP_AUTHOR = "ProjectTracker"


def get_data_dir() -> Path:
    """Return the base directory for persistent data."""
    dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
    path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    return get_data_dir() / "state.sqlite3"


def get_log_path() -> Path:
    return get_data_dir() / "tracker.log"


def resolve_db_path(db_path: Optional[Path] = None) -> Path:
    """Use an explicit state database location, creating its directory, or the default."""
    if db_path is None:
        return get_db_path()
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
