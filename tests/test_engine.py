"""Tests for the TrackerEngine inbox and heartbeat"""

import asyncio
import sqlite3
from datetime import timedelta

import pytest

from project_tracker.config import TrackerSettings
from project_tracker.engine import TrackerEngine
from project_tracker.models import IdleState, IdleStateChanged, TabActivated


def test_events_and_requests_are_applied_in_order(tracker, clock):
    async def scenario():
        await tracker.start()
        try:
            clock.advance(5000)
            await tracker.submit_event(TabActivated(tab_id=1))
            return await tracker.request({"action": "getAllAppState"})
        finally:
            await tracker.stop()

    state = asyncio.run(scenario())
    assert state["trackingData"] == {"General": 5000}


def test_prompt_response_wins_over_earlier_set_project(tracker, clock):
    async def scenario():
        await tracker.start()
        try:
            await tracker.submit_event(IdleStateChanged(IdleState.IDLE))
            clock.advance(30000)
            await tracker.submit_event(IdleStateChanged(IdleState.ACTIVE))
            results = await asyncio.gather(
                tracker.request({"action": "setProject", "project": "Design"}),
                tracker.request(
                    {
                        "action": "handlePromptResponse",
                        "idleAction": "discard",
                        "idleProject": None,
                        "nextActiveProject": "Work",
                    }
                ),
            )
            state = await tracker.request({"action": "getAllAppState"})
            return results, state
        finally:
            await tracker.stop()

    results, state = asyncio.run(scenario())
    assert results[0] == {"status": "ok", "newProject": "Design"}
    assert results[1] == {"status": "ok"}
    assert state["currentProject"] == "Work"
    assert "Design" in state["availableProjects"]


def test_request_before_start_fails(tracker):
    with pytest.raises(RuntimeError):
        asyncio.run(tracker.request({"action": "getAllAppState"}))


def test_persistence_failure_propagates_to_caller(tracker):
    async def scenario():
        await tracker.start()
        tracker.store.close()
        with pytest.raises(sqlite3.Error):
            await tracker.request({"action": "resetAllData"})
        # The inbox keeps serving after a failed job.
        state = await tracker.request({"action": "getAvailableProjects"})
        with pytest.raises(sqlite3.Error):
            await tracker.stop()
        return state

    assert asyncio.run(scenario()) == {"availableProjects": ["General"]}


def test_heartbeat_expires_abandoned_prompt(db_path, clock, host):
    settings = TrackerSettings(
        heartbeat_interval=timedelta(milliseconds=10),
        prompt_timeout=timedelta(seconds=1),
    )
    engine = TrackerEngine(db_path, settings, host=host, clock=clock)

    async def scenario():
        await engine.start()
        try:
            await engine.submit_event(IdleStateChanged(IdleState.IDLE))
            clock.advance(20000)
            await engine.submit_event(IdleStateChanged(IdleState.ACTIVE))
            assert engine.coordinator.is_open
            clock.advance(5000)
            for _ in range(100):
                await asyncio.sleep(0.01)
                if not engine.coordinator.is_open:
                    break
            return engine.prompt_status()
        finally:
            await engine.stop()

    status = asyncio.run(scenario())
    assert status["open"] is False
    assert status["idleDuration"] == 0
    assert host.prompts_opened == 1


def test_stop_saves_state(db_path, clock, host):
    engine = TrackerEngine(db_path, TrackerSettings(), host=host, clock=clock)

    async def scenario():
        await engine.start()
        engine.store.set_current("Work")
        await engine.stop()

    asyncio.run(scenario())

    reopened = TrackerEngine(db_path, TrackerSettings(), host=host, clock=clock)
    try:
        assert reopened.store.state.current_project == "Work"
    finally:
        reopened.store.close()
