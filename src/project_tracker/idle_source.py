"""Local idle signal source for hosts that do not report idle state themselves."""

from __future__ import annotations

import asyncio
import ctypes
import logging
import sys
from typing import Callable, Optional

from .models import IdleState, IdleStateChanged

logger = logging.getLogger(__name__)


class WindowsIdleDetector:
    """Detects idle state using Win32 APIs."""

    def __init__(self) -> None:
        from ctypes import wintypes

        class LASTINPUTINFO(ctypes.Structure):
            _fields_ = [("cbSize", wintypes.UINT), ("dwTime", wintypes.DWORD)]

        self._info_type = LASTINPUTINFO
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]
        self._kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]

    def milliseconds_since_input(self) -> int:
        last_input = self._info_type()
        last_input.cbSize = ctypes.sizeof(last_input)
        if not self._user32.GetLastInputInfo(ctypes.byref(last_input)):
            raise ctypes.WinError()  # type: ignore[attr-defined]
        elapsed = self._kernel32.GetTickCount64() - last_input.dwTime
        return int(elapsed)


class IdlePoller:
    """Polls an idle counter and emits ``IdleStateChanged`` on transitions."""

    def __init__(
        self,
        idle_ms: Callable[[], int],
        emit: Callable[[IdleStateChanged], None],
        *,
        threshold_ms: int = 60_000,
        poll_seconds: float = 5.0,
    ) -> None:
        self._idle_ms = idle_ms
        self._emit = emit
        self.threshold_ms = threshold_ms
        self.poll_seconds = poll_seconds
        self.state = IdleState.ACTIVE

    def sample_once(self) -> Optional[IdleState]:
        try:
            idle = self._idle_ms() >= self.threshold_ms
        except OSError:
            logger.exception("Failed to query idle state; assuming active.")
            idle = False
        new_state = IdleState.IDLE if idle else IdleState.ACTIVE
        if new_state is self.state:
            return None
        self.state = new_state
        logger.debug("Local idle state changed to %s", new_state.value)
        self._emit(IdleStateChanged(new_state))
        return new_state

    async def run(self) -> None:
        while True:
            self.sample_once()
            await asyncio.sleep(self.poll_seconds)


def create_local_idle_poller(
    emit: Callable[[IdleStateChanged], None],
    *,
    threshold_ms: int,
    poll_seconds: float,
) -> IdlePoller:
    if sys.platform != "win32":
        raise RuntimeError("Local idle detection is only available on Windows.")
    detector = WindowsIdleDetector()
    return IdlePoller(
        detector.milliseconds_since_input,
        emit,
        threshold_ms=threshold_ms,
        poll_seconds=poll_seconds,
    )
