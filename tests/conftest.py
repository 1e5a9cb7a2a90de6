"""Shared fixtures for tracker tests."""

from typing import Optional

import pytest

from project_tracker.config import TrackerSettings
from project_tracker.engine import TrackerEngine


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class FakeHost:
    """Host stub recording prompt requests and answering tab queries."""

    def __init__(self):
        self.window_tabs = {}
        self.focused_tab: Optional[int] = None
        self.prompts_opened = 0
        self.fail_queries = False

    async def query_active_tab(self, window_id):
        if self.fail_queries:
            raise RuntimeError("host unavailable")
        return self.window_tabs.get(window_id)

    async def query_focused_tab(self):
        if self.fail_queries:
            raise RuntimeError("host unavailable")
        return self.focused_tab

    def open_prompt(self):
        self.prompts_opened += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "state.sqlite3"


@pytest.fixture
def tracker(db_path, clock, host):
    """A fully wired engine whose components are driven directly."""
    settings = TrackerSettings(prompt_timeout=None)
    engine = TrackerEngine(db_path, settings, host=host, clock=clock)
    yield engine
    engine.store.close()
