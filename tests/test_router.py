"""Tests for MessageRouter request handling"""

import asyncio

import pytest

from project_tracker.models import IdleState, IdleStateChanged


def dispatch(tracker, message):
    return asyncio.run(tracker.router.dispatch(message))


def test_get_all_app_state(tracker):
    assert dispatch(tracker, {"action": "getAllAppState"}) == {
        "trackingData": {"General": 0},
        "availableProjects": ["General"],
        "currentProject": "General",
    }


def test_set_project_credits_outgoing_project_first(tracker, clock):
    tracker.store.set_current("Work")
    tracker.store.credit("Work", 10000)
    clock.advance(2000)

    response = dispatch(tracker, {"action": "setProject", "project": "Design"})

    assert response == {"status": "ok", "newProject": "Design"}
    state = tracker.store.state
    assert state.tracking_data["Work"] == 12000
    assert state.tracking_data["Design"] == 0
    assert "Design" in state.available_projects
    assert state.current_project == "Design"


def test_set_project_trims_name(tracker):
    response = dispatch(tracker, {"action": "setProject", "project": "  Docs  "})
    assert response["newProject"] == "Docs"
    assert tracker.store.state.current_project == "Docs"


@pytest.mark.parametrize("name", ["", "   ", None])
def test_set_project_rejects_blank_name(tracker, name):
    response = dispatch(tracker, {"action": "setProject", "project": name})
    assert response == {"status": "error", "message": "Invalid project name provided."}
    assert tracker.store.state.current_project == "General"
    assert tracker.store.state.available_projects == ["General"]


def test_get_available_projects_sorted(tracker):
    tracker.store.add_project("Zeta")
    tracker.store.add_project("Alpha")
    assert dispatch(tracker, {"action": "getAvailableProjects"}) == {
        "availableProjects": ["Alpha", "General", "Zeta"]
    }


def test_reset_all_data(tracker, clock):
    tracker.store.set_current("Work")
    tracker.store.credit("Work", 5000)
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.IDLE)))
    clock.advance(9000)
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.ACTIVE)))

    assert dispatch(tracker, {"action": "resetAllData"}) == {"status": "ok"}

    assert dispatch(tracker, {"action": "getAllAppState"}) == {
        "trackingData": {},
        "availableProjects": ["General"],
        "currentProject": "General",
    }
    assert not tracker.stash.is_set
    assert not tracker.coordinator.is_open


def test_prompt_response_via_router(tracker, clock):
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.IDLE)))
    clock.advance(45000)
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.ACTIVE)))

    response = dispatch(
        tracker,
        {
            "action": "handlePromptResponse",
            "idleAction": "categorize",
            "idleProject": "Break",
            "nextActiveProject": "Work",
        },
    )

    assert response == {"status": "ok"}
    assert tracker.store.state.tracking_data["Break"] == 45000
    assert tracker.store.state.current_project == "Work"


def test_invalid_prompt_response_is_rejected(tracker):
    response = dispatch(
        tracker, {"action": "handlePromptResponse", "idleAction": "keep"}
    )
    assert response["status"] == "error"


def test_unknown_action(tracker):
    response = dispatch(tracker, {"action": "launchRockets"})
    assert response == {"status": "error", "message": "Unknown action: 'launchRockets'"}


def test_total_never_decreases_without_reset(tracker, clock):
    totals = []
    for name in ["Work", "Design", "Work", "General"]:
        clock.advance(1500)
        dispatch(tracker, {"action": "setProject", "project": name})
        state = tracker.store.state
        assert state.current_project in state.available_projects
        assert state.tracking_data[state.current_project] >= 0
        totals.append(state.total_ms)
    assert totals == sorted(totals)


def test_set_project_during_idle_does_not_credit_idle_time(tracker, clock):
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.IDLE)))
    clock.advance(30000)
    dispatch(tracker, {"action": "setProject", "project": "Work"})
    clock.advance(15000)
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.ACTIVE)))

    dispatch(
        tracker,
        {
            "action": "handlePromptResponse",
            "idleAction": "categorize",
            "idleProject": "Break",
            "nextActiveProject": "Work",
        },
    )

    assert tracker.store.state.tracking_data == {"General": 0, "Work": 0, "Break": 45000}


def test_set_project_while_prompt_open_does_not_credit(tracker, clock):
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.IDLE)))
    clock.advance(10000)
    asyncio.run(tracker.monitor.handle(IdleStateChanged(IdleState.ACTIVE)))
    clock.advance(20000)

    response = dispatch(tracker, {"action": "setProject", "project": "Design"})

    assert response == {"status": "ok", "newProject": "Design"}
    assert tracker.store.state.total_ms == 0
