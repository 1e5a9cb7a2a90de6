"""Request/response surface for UI collaborators."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .accumulator import TimeAccumulator
from .models import IdleAction, PromptResponse, normalize_project_name
from .monitor import ActivityMonitor
from .prompt import IdlePromptCoordinator
from .store import StateStore

logger = logging.getLogger(__name__)


class SetProjectRequest(BaseModel):
    project: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class PromptResponsePayload(BaseModel):
    idle_action: Literal["categorize", "discard"] = Field(alias="idleAction")
    idle_project: Optional[str] = Field(default=None, alias="idleProject")
    next_active_project: Optional[str] = Field(default=None, alias="nextActiveProject")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_response(self) -> PromptResponse:
        return PromptResponse(
            idle_action=IdleAction(self.idle_action),
            idle_project=self.idle_project,
            next_active_project=self.next_active_project,
        )


class MessageRouter:
    """Answers UI requests; each request yields exactly one response dict."""

    def __init__(
        self,
        store: StateStore,
        accumulator: TimeAccumulator,
        monitor: ActivityMonitor,
        coordinator: IdlePromptCoordinator,
        clock: Callable[[], int],
    ) -> None:
        self._store = store
        self._accumulator = accumulator
        self._monitor = monitor
        self._coordinator = coordinator
        self._clock = clock

    def get_all_app_state(self) -> Dict[str, Any]:
        return self._store.state.to_payload()

    def get_available_projects(self) -> Dict[str, Any]:
        return {"availableProjects": sorted(self._store.state.available_projects)}

    async def set_project(self, name: Optional[str]) -> Dict[str, Any]:
        self._monitor.checkpoint(self._clock())
        project = normalize_project_name(name)
        if project is None:
            logger.warning("setProject received an invalid project name: %r", name)
            return {"status": "error", "message": "Invalid project name provided."}
        self._store.set_current(project)
        self._store.save()
        logger.info("Current project set to %s", project)
        return {"status": "ok", "newProject": project}

    async def handle_prompt_response(self, payload: PromptResponsePayload) -> Dict[str, Any]:
        await self._coordinator.handle_response(payload.to_response())
        return {"status": "ok"}

    async def reset_all_data(self) -> Dict[str, Any]:
        self._store.reset()
        self._monitor.end_episode()
        self._coordinator.cancel()
        self._accumulator.rearm(self._clock())
        return {"status": "ok"}

    async def dispatch(self, message: Dict[str, Any]) -> Dict[str, Any]:
        """Route a ``{"action": ..., ...}`` message to its handler."""
        body = dict(message)
        action = body.pop("action", None)
        try:
            if action == "getAllAppState":
                return self.get_all_app_state()
            if action == "getAvailableProjects":
                return self.get_available_projects()
            if action == "setProject":
                return await self.set_project(SetProjectRequest(**body).project)
            if action == "handlePromptResponse":
                return await self.handle_prompt_response(
                    PromptResponsePayload.model_validate(body)
                )
            if action == "resetAllData":
                return await self.reset_all_data()
        except ValidationError as exc:
            logger.warning("Rejected %s request: %s", action, exc)
            return {"status": "error", "message": f"Invalid {action} request."}
        return {"status": "error", "message": f"Unknown action: {action!r}"}
