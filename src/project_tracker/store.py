"""Ownership of the persisted snapshot and the ephemeral idle stash."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import DEFAULT_PROJECT
from .db import SNAPSHOT_KEY, open_database, read_raw_value, read_value, write_value
from .models import AppState, normalize_project_name

logger = logging.getLogger(__name__)


class StateStore:
    """Load, mutate and persist the snapshot.

    All mutation of :class:`AppState` goes through this class. Persistence is a
    full-snapshot overwrite, so the last write always wins.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = open_database(self.db_path, check_same_thread=False)
        self.state = AppState()

    def load(self) -> AppState:
        payload = read_value(self._conn, SNAPSHOT_KEY)
        self.state = AppState.from_payload(payload) if payload else AppState()
        state = self.state
        if DEFAULT_PROJECT not in state.available_projects:
            state.available_projects.append(DEFAULT_PROJECT)
        if state.current_project and state.current_project not in state.available_projects:
            state.available_projects.append(state.current_project)
        state.available_projects = sorted(set(state.available_projects))
        if state.current_project:
            state.tracking_data.setdefault(state.current_project, 0)
        logger.info(
            "Loaded state from %s: %d projects, current=%s",
            self.db_path,
            len(state.available_projects),
            state.current_project,
        )
        return state

    def save(self) -> None:
        write_value(self._conn, SNAPSHOT_KEY, self.state.to_payload())

    def raw_snapshot(self) -> Optional[str]:
        """The persisted snapshot text exactly as stored."""
        return read_raw_value(self._conn, SNAPSHOT_KEY)

    def reset(self) -> None:
        self.state = AppState()
        self.save()
        logger.info("All tracking data reset.")

    def add_project(self, name: Optional[str]) -> Optional[str]:
        project = normalize_project_name(name)
        if project is None:
            return None
        if project not in self.state.available_projects:
            self.state.available_projects.append(project)
            self.state.available_projects.sort()
            logger.debug("Registered new project %r", project)
        self.state.tracking_data.setdefault(project, 0)
        return project

    def set_current(self, name: Optional[str]) -> Optional[str]:
        project = self.add_project(name)
        if project is not None:
            self.state.current_project = project
        return project

    def credit(self, project: Optional[str], duration_ms: int) -> None:
        if not project or duration_ms <= 0:
            return
        data = self.state.tracking_data
        data[project] = data.get(project, 0) + int(duration_ms)

    def close(self) -> None:
        self._conn.close()


class SessionStash:
    """Process-session storage for the idle duration awaiting classification."""

    def __init__(self) -> None:
        self._idle_duration: Optional[int] = None

    def put(self, duration_ms: int) -> None:
        self._idle_duration = max(int(duration_ms), 0)

    def peek(self) -> int:
        return self._idle_duration or 0

    def take(self) -> int:
        """Read and clear; a second call returns 0."""
        duration, self._idle_duration = self._idle_duration, None
        return duration or 0

    def clear(self) -> None:
        self._idle_duration = None

    @property
    def is_set(self) -> bool:
        return self._idle_duration is not None
