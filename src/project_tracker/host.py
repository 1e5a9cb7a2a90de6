"""The host environment as seen by the tracker: tab queries and prompt requests."""

from __future__ import annotations

import logging
import threading
import webbrowser
from typing import Optional, Protocol

from .models import ActivityEvent, TabActivated, WindowFocusChanged

logger = logging.getLogger(__name__)


class Host(Protocol):
    async def query_active_tab(self, window_id: int) -> Optional[int]:
        ...

    async def query_focused_tab(self) -> Optional[int]:
        ...

    def open_prompt(self) -> None:
        ...


class SignalHost:
    """Answers tab queries from the signals the host has already reported.

    The browser side posts tab activations (with their window) and focus
    changes; this keeps the latest active tab per window so focus changes
    and prompt resolution can re-acquire a tab without a round trip.
    """

    def __init__(self, prompt_url: Optional[str] = None) -> None:
        self.prompt_url = prompt_url
        self.prompt_requests = 0
        self._active_tabs: dict[int, int] = {}
        self._focused_window: Optional[int] = None
        self._last_tab: Optional[int] = None

    def observe(self, event: ActivityEvent) -> None:
        if isinstance(event, TabActivated):
            self._last_tab = event.tab_id
            if event.window_id is not None:
                self._active_tabs[event.window_id] = event.tab_id
                self._focused_window = event.window_id
        elif isinstance(event, WindowFocusChanged):
            self._focused_window = event.window_id

    async def query_active_tab(self, window_id: int) -> Optional[int]:
        return self._active_tabs.get(window_id)

    async def query_focused_tab(self) -> Optional[int]:
        if self._focused_window is None:
            return self._last_tab
        return self._active_tabs.get(self._focused_window, self._last_tab)

    def open_prompt(self) -> None:
        self.prompt_requests += 1
        if not self.prompt_url:
            logger.info("Classification prompt requested; waiting for the UI to poll.")
            return
        threading.Thread(
            target=_launch_prompt, args=(self.prompt_url,), daemon=True
        ).start()


def _launch_prompt(url: str) -> None:
    try:
        webbrowser.open(url, new=1)
    except Exception:
        logger.exception("Failed to open prompt window at %s", url)
