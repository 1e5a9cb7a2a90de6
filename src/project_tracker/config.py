"""Configuration models and helpers for the project tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


DEFAULT_PROJECT = "General"


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the tracking engine."""

    noise_threshold: timedelta = timedelta(seconds=1)
    idle_threshold: timedelta = timedelta(seconds=60)
    heartbeat_interval: timedelta = timedelta(seconds=30)
    poll_interval: timedelta = timedelta(seconds=5)
    prompt_timeout: Optional[timedelta] = timedelta(minutes=10)

    @property
    def noise_threshold_ms(self) -> int:
        return int(self.noise_threshold.total_seconds() * 1000)

    @property
    def idle_threshold_ms(self) -> int:
        return int(self.idle_threshold.total_seconds() * 1000)

    @property
    def prompt_timeout_ms(self) -> Optional[int]:
        if self.prompt_timeout is None:
            return None
        return int(self.prompt_timeout.total_seconds() * 1000)

    @classmethod
    def from_intervals(
        cls,
        idle_seconds: float = 60.0,
        heartbeat_seconds: float = 30.0,
        prompt_timeout_minutes: float | None = 10.0,
        poll_seconds: float | None = None,
    ) -> "TrackerSettings":
        poll = poll_seconds if poll_seconds is not None else min(5.0, idle_seconds / 4)
        timeout = (
            timedelta(minutes=prompt_timeout_minutes)
            if prompt_timeout_minutes
            else None
        )
        return cls(
            idle_threshold=timedelta(seconds=idle_seconds),
            heartbeat_interval=timedelta(seconds=heartbeat_seconds),
            poll_interval=timedelta(seconds=poll),
            prompt_timeout=timeout,
        )
