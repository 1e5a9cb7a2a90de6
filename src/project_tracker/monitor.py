"""Host activity signal handling and idle-episode detection."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .accumulator import TimeAccumulator
from .host import Host
from .models import (
    ActivityEvent,
    IdleEpisode,
    IdleState,
    IdleStateChanged,
    TabActivated,
    TabUpdated,
    WindowFocusChanged,
)
from .store import SessionStash, StateStore

logger = logging.getLogger(__name__)


class ActivityMonitor:
    """Drives checkpoints from host signals and detects idle-episode boundaries.

    Every handler checkpoints before acting on the signal and persists before
    returning. While an idle episode is pending the checkpoint only moves the
    origin, so idle time reaches a project through the prompt or not at all.
    When an idle episode ends, the idle duration is stashed and
    ``on_idle_end`` is called to request the classification prompt; tracking
    resumes only once that prompt is resolved.
    """

    def __init__(
        self,
        store: StateStore,
        accumulator: TimeAccumulator,
        stash: SessionStash,
        host: Host,
        clock: Callable[[], int],
        on_idle_end: Optional[Callable[[], None]] = None,
    ) -> None:
        self._store = store
        self._accumulator = accumulator
        self._stash = stash
        self._host = host
        self._clock = clock
        self.on_idle_end = on_idle_end
        self.active_tab_id: Optional[int] = None
        self.episode = IdleEpisode()
        self.awaiting_response = False

    async def handle(self, event: ActivityEvent) -> None:
        if isinstance(event, TabActivated):
            await self._on_tab_activated(event)
        elif isinstance(event, TabUpdated):
            await self._on_tab_updated(event)
        elif isinstance(event, WindowFocusChanged):
            await self._on_focus_changed(event)
        elif isinstance(event, IdleStateChanged):
            await self._on_idle_state(event)
        else:
            raise TypeError(f"Unsupported activity event: {event!r}")
        self._store.save()

    async def _on_tab_activated(self, event: TabActivated) -> None:
        self.checkpoint(self._clock())
        self.active_tab_id = event.tab_id

    async def _on_tab_updated(self, event: TabUpdated) -> None:
        if event.tab_id == self.active_tab_id and event.is_active:
            self.checkpoint(self._clock())

    async def _on_focus_changed(self, event: WindowFocusChanged) -> None:
        self.checkpoint(self._clock())
        if event.window_id is None:
            self.active_tab_id = None
        else:
            tab_id = await self._query(self._host.query_active_tab(event.window_id))
            if tab_id is not None:
                self.active_tab_id = tab_id
        self._accumulator.rearm(self._clock())

    async def _on_idle_state(self, event: IdleStateChanged) -> None:
        now = self._clock()
        self.checkpoint(now)
        if event.state in (IdleState.IDLE, IdleState.LOCKED):
            self.active_tab_id = None
            if not self.episode.pending_prompt or self.episode.idle_start_time is None:
                self.episode.idle_start_time = now
            self.episode.pending_prompt = True
            logger.info("Host reported %s; idle episode started.", event.state.value)
            return

        if not self.episode.pending_prompt:
            return
        start = self.episode.idle_start_time
        idle_duration = now - start if start is not None else 0
        self.episode = IdleEpisode()
        self.awaiting_response = True
        self._stash.put(idle_duration)
        logger.info("Idle episode ended after %d ms; requesting prompt.", idle_duration)
        if self.on_idle_end is not None:
            self.on_idle_end()

    def checkpoint(self, now: int) -> None:
        """Credit elapsed time unless an idle episode or its prompt is unresolved."""
        # Idle and mid-prompt time only reaches a project through the prompt.
        if self.episode.pending_prompt or self.awaiting_response:
            self._accumulator.rearm(now)
        else:
            self._accumulator.checkpoint(now)

    async def resume(self) -> None:
        self.awaiting_response = False
        self.active_tab_id = await self._query(self._host.query_focused_tab())

    def end_episode(self) -> None:
        self.episode = IdleEpisode()
        self.awaiting_response = False

    @staticmethod
    async def _query(awaitable) -> Optional[int]:
        try:
            return await awaitable
        except Exception:
            logger.exception("Host tab query failed; treating as no active tab.")
            return None
