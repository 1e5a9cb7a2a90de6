"""Classification prompt handling across an idle boundary."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .accumulator import TimeAccumulator
from .config import DEFAULT_PROJECT
from .host import Host
from .models import IdleAction, PromptResponse, normalize_project_name
from .monitor import ActivityMonitor
from .store import SessionStash, StateStore

logger = logging.getLogger(__name__)


class IdlePromptCoordinator:
    """Opens the prompt after an idle episode and applies the user's answer."""

    def __init__(
        self,
        store: StateStore,
        accumulator: TimeAccumulator,
        stash: SessionStash,
        monitor: ActivityMonitor,
        host: Host,
        clock: Callable[[], int],
        *,
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._store = store
        self._accumulator = accumulator
        self._stash = stash
        self._monitor = monitor
        self._host = host
        self._clock = clock
        self.timeout_ms = timeout_ms
        self.prompt_opened_at: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.prompt_opened_at is not None

    def open_prompt(self) -> None:
        self.prompt_opened_at = self._clock()
        self._host.open_prompt()

    async def handle_response(self, response: PromptResponse) -> None:
        # Clear-on-read: a duplicate response sees 0 and credits nothing.
        duration = self._stash.take()
        self.prompt_opened_at = None

        if response.idle_action is IdleAction.CATEGORIZE:
            idle_project = normalize_project_name(response.idle_project)
            if idle_project and duration > 0:
                self._store.add_project(idle_project)
                self._store.credit(idle_project, duration)
                logger.info("Categorized %d ms of idle time as %s", duration, idle_project)
        else:
            logger.info("Discarded %d ms of idle time.", duration)

        next_project = normalize_project_name(response.next_active_project) or DEFAULT_PROJECT
        self._store.set_current(next_project)

        await self._monitor.resume()
        self._accumulator.rearm(self._clock())
        self._store.save()
        logger.info("Tracking resumed for %s", next_project)

    async def expire_if_abandoned(self, now: int) -> bool:
        """Auto-discard a prompt left unanswered past the timeout."""
        if self.prompt_opened_at is None or self.timeout_ms is None:
            return False
        if now - self.prompt_opened_at < self.timeout_ms:
            return False
        logger.warning(
            "Prompt unanswered for %d ms; discarding idle time and keeping %s.",
            now - self.prompt_opened_at,
            self._store.state.current_project,
        )
        await self.handle_response(
            PromptResponse(
                idle_action=IdleAction.DISCARD,
                next_active_project=self._store.state.current_project,
            )
        )
        return True

    def cancel(self) -> None:
        self.prompt_opened_at = None
        self._stash.clear()
