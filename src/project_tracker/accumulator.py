"""Credit elapsed time to the current project."""

from __future__ import annotations

import logging

from .store import StateStore

logger = logging.getLogger(__name__)


class TimeAccumulator:
    """Tracks the checkpoint origin and credits elapsed time past the noise threshold."""

    def __init__(self, store: StateStore, *, threshold_ms: int = 1000, now: int = 0) -> None:
        self._store = store
        self.threshold_ms = threshold_ms
        self.last_active_time = now

    def checkpoint(self, now: int) -> int:
        """Credit ``now - last_active_time`` and move the origin to ``now``.

        Sub-threshold intervals are dropped rather than carried forward, so a
        burst of redundant signals never adds up to a large credit later.
        Returns the credited amount.
        """
        elapsed = now - self.last_active_time
        project = self._store.state.current_project
        credited = 0
        if elapsed > self.threshold_ms and project:
            self._store.credit(project, elapsed)
            credited = elapsed
            logger.debug("Credited %d ms to %s", elapsed, project)
        self.last_active_time = now
        self._store.save()
        return credited

    def rearm(self, now: int) -> None:
        self.last_active_time = now
