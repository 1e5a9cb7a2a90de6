"""Domain models for tracked state and host signals."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .config import DEFAULT_PROJECT


def now_ms() -> int:
    """Wall-clock time in integer milliseconds."""
    return time.time_ns() // 1_000_000


def normalize_project_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    trimmed = name.strip()
    return trimmed or None


@dataclass(slots=True)
class AppState:
    """The durable snapshot: per-project totals, known projects, current project."""

    tracking_data: dict[str, int] = field(default_factory=dict)
    available_projects: list[str] = field(
        default_factory=lambda: [DEFAULT_PROJECT]
    )
    current_project: Optional[str] = DEFAULT_PROJECT

    def to_payload(self) -> dict[str, object]:
        return {
            "trackingData": dict(self.tracking_data),
            "availableProjects": list(self.available_projects),
            "currentProject": self.current_project,
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "AppState":
        tracking = {
            str(name): max(int(ms), 0)
            for name, ms in (payload.get("trackingData") or {}).items()
        }
        projects = list(payload.get("availableProjects") or [DEFAULT_PROJECT])
        current = payload.get("currentProject") or DEFAULT_PROJECT
        return cls(
            tracking_data=tracking,
            available_projects=projects,
            current_project=current,
        )

    @property
    def total_ms(self) -> int:
        return sum(self.tracking_data.values())


@dataclass(slots=True)
class IdleEpisode:
    """Exists between an idle/locked transition and its resolution."""

    idle_start_time: Optional[int] = None
    pending_prompt: bool = False


class IdleState(str, Enum):
    ACTIVE = "active"
    IDLE = "idle"
    LOCKED = "locked"


class IdleAction(str, Enum):
    CATEGORIZE = "categorize"
    DISCARD = "discard"


@dataclass(frozen=True, slots=True)
class TabActivated:
    tab_id: int
    window_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class TabUpdated:
    tab_id: int
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class WindowFocusChanged:
    window_id: Optional[int]


@dataclass(frozen=True, slots=True)
class IdleStateChanged:
    state: IdleState


ActivityEvent = Union[TabActivated, TabUpdated, WindowFocusChanged, IdleStateChanged]


@dataclass(frozen=True, slots=True)
class PromptResponse:
    """The combined answer from the classification prompt."""

    idle_action: IdleAction
    next_active_project: Optional[str]
    idle_project: Optional[str] = None
